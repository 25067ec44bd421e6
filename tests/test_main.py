import io

import pytest

from lineio.__main__ import build_parser, main


def test_parser():
    args = build_parser().parse_args(["COM14", "--start", "STX", "--end", "ETX", "--exchange"])
    assert args.port == "COM14"
    assert args.exchange
    assert args.dtr is None


def test_list_ports(capsys):
    assert main(["--list"]) == 0


def test_port_required():
    with pytest.raises(SystemExit):
        main([])


def test_start_requires_end():
    with pytest.raises(SystemExit):
        main(["loop://", "--start", "STX"])


def test_exchange_over_loopback(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("i:0\nstatus\n"))
    assert main(["loop://", "--end", "LF", "--exchange", "--timeout", "1000"]) == 0
    out = capsys.readouterr().out
    assert "< i:0" in out
    assert "< status" in out


def test_unknown_port(capsys):
    assert main(["nosuchproto://x"]) == 1
