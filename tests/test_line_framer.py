import pytest

from lineio.config import FrameConfig
from lineio.constants import Ascii
from lineio.framer import LineIO_LineFramer

STX, ETX = Ascii.STX, Ascii.ETX


def _feed(framer, data, size):
    lines = []
    for i in range(0, len(data), size):
        framer.processIncomingPacket(data[i:i + size], lines.append)
    return lines


@pytest.fixture
def stx_etx():
    return LineIO_LineFramer(FrameConfig(end_marker=ETX, start_marker=STX))


@pytest.mark.parametrize("size", range(1, 24))
def test_lines_reassembled_for_any_chunk_size(stx_etx, size):
    data = f"{STX}i:0{ETX}{STX}temp=21.5{ETX}".encode()
    assert _feed(stx_etx, data, size) == ["i:0", "temp=21.5"]


def test_two_lines_in_reads_of_five_and_six_bytes(stx_etx):
    lines = []
    data = b"\x02i:0\x03\x02i:1\x03"
    stx_etx.processIncomingPacket(data[:5], lines.append)
    assert lines == ["i:0"]
    # second read asks for 6 bytes, 5 are left
    stx_etx.processIncomingPacket(data[5:11], lines.append)
    assert lines == ["i:0", "i:1"]


def test_line_split_over_two_reads(stx_etx):
    # 5 bytes then 6 bytes, the second read completing the line
    lines = _feed(stx_etx, f"{STX}hell".encode(), 5)
    assert lines == []
    assert stx_etx.getRawFrame() == "hell"
    lines = _feed(stx_etx, f"o wor{ETX}".encode(), 6)
    assert lines == ["hello wor"]


def test_noise_outside_markers_is_ignored(stx_etx):
    data = f"xx{ETX}{STX}a{ETX}garbage{STX}b{ETX}".encode()
    assert _feed(stx_etx, data, 4) == ["a", "b"]


def test_empty_line(stx_etx):
    assert _feed(stx_etx, f"{STX}{ETX}".encode(), 10) == [""]


def test_auto_start_without_start_marker():
    framer = LineIO_LineFramer(FrameConfig(end_marker="\n", start_marker=None))
    assert framer.auto_start
    assert _feed(framer, b"one\ntwo\n\nthree", 3) == ["one", "two", ""]
    assert framer.getRawFrame() == "three"


def test_multibyte_character_split_across_chunks():
    framer = LineIO_LineFramer(FrameConfig(end_marker="\n"))
    data = "온도=21°C\n".encode("utf-8")
    assert _feed(framer, data, 1) == ["온도=21°C"]


def test_invalid_bytes_are_replaced():
    framer = LineIO_LineFramer(FrameConfig(end_marker="\n"))
    assert _feed(framer, b"a\xffb\n", 10) == ["a�b"]


def test_reset_frame_drops_partial_line(stx_etx):
    _feed(stx_etx, f"{STX}partial".encode(), 10)
    assert stx_etx.isFrameReady()
    stx_etx.resetFrame()
    assert not stx_etx.isFrameReady()
    assert _feed(stx_etx, f"rest{ETX}{STX}next{ETX}".encode(), 10) == ["next"]


def test_build_packet(stx_etx):
    assert stx_etx.buildPacket("i:0") == b"\x02i:0\x03"
    auto = LineIO_LineFramer(FrameConfig(end_marker="\r"))
    assert auto.buildPacket("AT") == b"AT\r"


def test_built_packet_is_read_back(stx_etx):
    packet = stx_etx.buildPacket("set:led=1") + stx_etx.buildPacket("get:led")
    assert _feed(stx_etx, packet, 3) == ["set:led=1", "get:led"]


def test_callback_runs_before_next_line_is_scanned(stx_etx):
    seen = []

    def callback(line):
        seen.append((line, stx_etx.getRawFrame()))

    stx_etx.processIncomingPacket(f"{STX}a{ETX}{STX}b{ETX}".encode(), callback)
    assert seen == [("a", ""), ("b", "")]
