"""LineIO clients."""
from .base import LineIO_BaseClient
from .serial import Handshake, LineIO_SerialClient, LineIO_SerialPort, list_serial_ports

__all__ = [
    "Handshake",
    "LineIO_BaseClient",
    "LineIO_SerialClient",
    "LineIO_SerialPort",
    "list_serial_ports",
]
