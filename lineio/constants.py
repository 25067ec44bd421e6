class Ascii:  # pylint: disable=too-few-public-methods
    """ASCII control characters, as one-character strings."""

    NUL = "\x00"  # Null
    SOH = "\x01"  # Start of Heading
    STX = "\x02"  # Start of Text
    ETX = "\x03"  # End of Text
    EOT = "\x04"  # End of Transmission
    ENQ = "\x05"  # Enquiry
    ACK = "\x06"  # Acknowledge
    BEL = "\x07"  # Bell
    BS = "\x08"  # Backspace
    HT = "\x09"  # Horizontal Tab
    LF = "\x0a"  # Line Feed
    VT = "\x0b"  # Vertical Tab
    FF = "\x0c"  # Form Feed
    CR = "\x0d"  # Carriage Return
    SO = "\x0e"  # Shift Out
    SI = "\x0f"  # Shift In
    DLE = "\x10"  # Data Link Escape
    DC1 = "\x11"  # Device Control 1 (XON)
    DC2 = "\x12"  # Device Control 2
    DC3 = "\x13"  # Device Control 3 (XOFF)
    DC4 = "\x14"  # Device Control 4
    NAK = "\x15"  # Negative Acknowledge
    SYN = "\x16"  # Synchronous Idle
    ETB = "\x17"  # End of Transmission Block
    CAN = "\x18"  # Cancel
    EM = "\x19"  # End of Medium
    SUB = "\x1a"  # Substitute
    ESC = "\x1b"  # Escape
    FS = "\x1c"  # File Separator
    GS = "\x1d"  # Group Separator
    RS = "\x1e"  # Record Separator
    US = "\x1f"  # Unit Separator
    DEL = "\x7f"  # Delete

    TAB = HT

    @classmethod
    def names(cls):
        """Return {name: character} for every control character."""
        return {
            name: value
            for name, value in vars(cls).items()
            if name.isupper() and isinstance(value, str)
        }

    @classmethod
    def lookup(cls, name):
        """Return the character for a control character name (``"STX"``), or None."""
        return cls.names().get(str(name).upper())


class Defaults:
    EndMarker = Ascii.LF
    StartMarker = None  # auto-start
    ChunkSize = 10
    Encoding = "utf-8"
    EncodingErrors = "replace"
    ExchangeTimeout = 0.5  # seconds, armed when the exchange is queued
    ReadTimeout = 0.1  # serial poll interval of the scan thread
    WriteTimeout = 5.0
    JoinTimeout = 1.0
    IdleSleep = 0.01  # wait between polls of a non-blocking stream
    Baudrate = 9600
    Parity = "N"
    Bytesize = 8
    Stopbits = 1
    Handshake = "none"
    LoggerName = "lineio"

