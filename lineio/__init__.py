"""LineIO: delimiter framed line communication over byte streams.

Lines are read from a stream by a background scan thread and published to
subscribers; requests can be exchanged one at a time for the next line
received, with a timeout.
"""

from .config import get_lineio_config
from .constants import Ascii, Defaults
from .logger import Log, lineio_apply_logging_config
from .client.base import LineIO_BaseClient
from .client.serial import Handshake, LineIO_SerialClient, LineIO_SerialPort, list_serial_ports
from .exceptions import (
    ConnectionException,
    ExchangeTimeoutException,
    LineIO_Exception,
    LineIO_IOException,
    ParameterException,
)
from .framer import LineIO_LineFramer
from .transaction import FifoExchangeManager, PendingExchange

__version__ = "0.1.0"

# 패키지 로거 초기화
get_lineio_config().get_logger()

# --------------------------------------------------------------------------- #
# Exported symbols
# --------------------------------------------------------------------------- #

__all__ = [
    "Ascii",
    "ConnectionException",
    "Defaults",
    "ExchangeTimeoutException",
    "FifoExchangeManager",
    "Handshake",
    "LineIO_BaseClient",
    "LineIO_Exception",
    "LineIO_IOException",
    "LineIO_LineFramer",
    "LineIO_SerialClient",
    "LineIO_SerialPort",
    "Log",
    "ParameterException",
    "PendingExchange",
    "__version__",
    "lineio_apply_logging_config",
    "list_serial_ports",
]
