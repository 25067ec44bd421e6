"""LineIO client serial communication."""
from typing import Any, Optional

import serial
from serial.tools import list_ports

from ..config import get_serial_config
from ..exceptions import ConnectionException, ParameterException
from ..logger import Log
from .base import LineIO_BaseClient


class Handshake:  # pylint: disable=too-few-public-methods
    """Flow control modes."""

    NONE = "none"
    XON_XOFF = "xon_xoff"
    RTS_CTS = "rts_cts"
    DSR_DTR = "dsr_dtr"

    @classmethod
    def to_flags(cls, mode):
        """Return the pyserial ``xonxoff``/``rtscts``/``dsrdtr`` flags for ``mode``."""
        mode = str(mode or cls.NONE).lower()
        if mode not in (cls.NONE, cls.XON_XOFF, cls.RTS_CTS, cls.DSR_DTR):
            raise ParameterException(f"Unknown handshake: {mode}")
        return {
            "xonxoff": mode == cls.XON_XOFF,
            "rtscts": mode == cls.RTS_CTS,
            "dsrdtr": mode == cls.DSR_DTR,
        }


def list_serial_ports():
    """사용 가능한 시리얼 포트에 대한 (장치, 라벨) 튜플 목록을 반환합니다."""
    return [(p.device, f"{p.device} - {p.description}") for p in list_ports.comports()]


class LineIO_SerialPort:
    """A serial port exposing only the settings that are safe to use.

    Line settings (baud rate, data bits, parity, stop bits, handshake) can
    only be changed while the port is closed. The DTR/RTS control lines can
    be set at any time. ``open()`` returns the byte stream.

    ``port`` is a device name (``/dev/ttyUSB0``, ``COM14``) or any pyserial
    URL, e.g. ``loop://`` for a loopback port.
    """

    def __init__(
        self,
        port: str,
        baudrate: Optional[int] = None,
        bytesize: Optional[int] = None,
        parity: Optional[str] = None,
        stopbits: Optional[float] = None,
        handshake: Optional[str] = None,
        timeout: Optional[float] = None,
        write_timeout: Optional[float] = None,
        dtr: Optional[bool] = None,
        rts: Optional[bool] = None,
    ) -> None:
        settings = get_serial_config(
            baudrate=baudrate,
            bytesize=bytesize,
            parity=parity,
            stopbits=stopbits,
            handshake=handshake,
            timeout=timeout,
            write_timeout=write_timeout,
            dtr=dtr,
            rts=rts,
        )
        try:
            self.serial = serial.serial_for_url(port, do_not_open=True)
        except (serial.SerialException, ValueError) as exc:
            raise ConnectionException(f"Unsupported port {port}: {exc}") from exc
        self.name = port
        self.baudrate = settings["baudrate"]
        self.bytesize = settings["bytesize"]
        self.parity = settings["parity"]
        self.stopbits = settings["stopbits"]
        self.handshake = settings["handshake"]
        self.serial.timeout = settings["timeout"]
        self.serial.write_timeout = settings["write_timeout"]
        if settings["dtr"] is not None:
            self.dtr = settings["dtr"]
        if settings["rts"] is not None:
            self.rts = settings["rts"]

    def _check_closed(self, name):
        if self.is_open:
            raise ParameterException(f"{name} can only be changed while {self.name} is closed")

    # Port ID
    @property
    def port(self) -> str:
        return self.name

    @property
    def is_open(self) -> bool:
        return bool(self.serial.is_open)

    # Serial modes
    @property
    def baudrate(self) -> int:
        return self.serial.baudrate

    @baudrate.setter
    def baudrate(self, value):
        self._check_closed("baudrate")
        self.serial.baudrate = int(value)

    @property
    def bytesize(self) -> int:
        return self.serial.bytesize

    @bytesize.setter
    def bytesize(self, value):
        self._check_closed("bytesize")
        self.serial.bytesize = int(value)

    @property
    def parity(self) -> str:
        return self.serial.parity

    @parity.setter
    def parity(self, value):
        self._check_closed("parity")
        self.serial.parity = str(value).upper()

    @property
    def stopbits(self):
        return self.serial.stopbits

    @stopbits.setter
    def stopbits(self, value):
        self._check_closed("stopbits")
        self.serial.stopbits = value

    @property
    def handshake(self) -> str:
        if self.serial.xonxoff:
            return Handshake.XON_XOFF
        if self.serial.rtscts:
            return Handshake.RTS_CTS
        if self.serial.dsrdtr:
            return Handshake.DSR_DTR
        return Handshake.NONE

    @handshake.setter
    def handshake(self, value):
        self._check_closed("handshake")
        for flag, enabled in Handshake.to_flags(value).items():
            setattr(self.serial, flag, enabled)

    # Control lines
    @property
    def dtr(self) -> bool:
        return self.serial.dtr

    @dtr.setter
    def dtr(self, value):
        self.serial.dtr = bool(value)

    @property
    def rts(self) -> bool:
        return self.serial.rts

    @rts.setter
    def rts(self, value):
        self.serial.rts = bool(value)

    @property
    def cd(self) -> bool:
        return self.serial.cd

    @property
    def cts(self) -> bool:
        return self.serial.cts

    @property
    def dsr(self) -> bool:
        return self.serial.dsr

    def open(self):
        """Open the port and return it as a byte stream.

        :raises ConnectionException: If the port is already open or cannot be opened
        """
        if self.is_open:
            raise ConnectionException(f"Port {self.name} is already open")
        try:
            self.serial.open()
        except (serial.SerialException, ValueError) as exc:
            raise ConnectionException(f"Failed to open {self.name}: {exc}") from exc
        Log.debug(
            "Opened {} at {} baud ({}{}{})",
            self.name, self.baudrate, self.bytesize, self.parity, self.stopbits,
        )
        return self.serial

    def close(self):
        if self.is_open:
            self.serial.close()

    def __repr__(self):
        return (
            f"<{self.__class__.__name__} port={self.name} open={self.is_open} "
            f"baudrate={self.baudrate}>"
        )


class LineIO_SerialClient(LineIO_BaseClient):
    """
    **LineIO_SerialClient**

    :param port: Serial port used for communication, or a pyserial URL.
    :param baudrate: (optional) Bits per second.
    :param bytesize: (optional) Number of bits per byte 5-8.
    :param parity: (optional) 'E'ven, 'O'dd or 'N'one
    :param stopbits: (optional) Number of stop bits 1, 1.5 or 2.
    :param handshake: (optional) 'none', 'xon_xoff', 'rts_cts' or 'dsr_dtr'.
    :param dtr: (optional) Data-terminal-ready level.
    :param rts: (optional) Request-to-send level.
    :param read_timeout: (optional) Poll interval of the scan thread in seconds.
    :param kwargs: (optional) Frame and exchange settings, see :class:`LineIO_BaseClient`.

    Settings left out come from the configuration. Example::

        from lineio import Ascii, LineIO_SerialClient

        with LineIO_SerialClient("COM14", baudrate=115200, dtr=True, rts=True,
                                 end_marker=Ascii.ETX, start_marker=Ascii.STX) as client:
            client.subscribe(print)
            client.write_line("i:0")
    """

    def __init__(
        self,
        port: str,
        baudrate: Optional[int] = None,
        bytesize: Optional[int] = None,
        parity: Optional[str] = None,
        stopbits: Optional[float] = None,
        handshake: Optional[str] = None,
        dtr: Optional[bool] = None,
        rts: Optional[bool] = None,
        read_timeout: Optional[float] = None,
        write_timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> None:
        """Initialize LineIO Serial Client."""
        self.port = LineIO_SerialPort(
            port,
            baudrate=baudrate,
            bytesize=bytesize,
            parity=parity,
            stopbits=stopbits,
            handshake=handshake,
            timeout=read_timeout,
            write_timeout=write_timeout,
            dtr=dtr,
            rts=rts,
        )
        stream = self.port.open()
        try:
            super().__init__(stream=stream, **kwargs)
        except Exception:
            self.port.close()
            raise

    def recv(self, size):
        """Read what is waiting, up to ``size`` bytes; an empty read is not the end."""
        waiting = self.stream.in_waiting
        data = self.stream.read(min(max(waiting, 1), size))
        if data:
            Log.debug("recv: {}", data, ":hex")
        return data

    def _release_stream(self):
        cancel_read = getattr(self.stream, "cancel_read", None)
        if cancel_read is not None:
            try:
                cancel_read()
            except (OSError, ValueError) as exc:
                Log.debug("cancel_read on {} failed: {}", self, exc, ":str")
        try:
            self.port.close()
        except (OSError, ValueError) as exc:
            Log.warning("Error while closing serial port {}: {}", self.port.name, exc, ":str")

    def __str__(self):
        """Build a string representation of the connection.

        :returns: The string representation
        """
        return f"LineIO_SerialClient({self.port.name})"
