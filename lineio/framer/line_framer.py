import codecs

from ..config import FrameConfig
from ..constants import Defaults
from ..logger import Log
from ..utilities import printable
from . import LineIO_Framer


class LineIO_LineFramer(LineIO_Framer):
    """Delimiter based line framer.

    A line is ``[start_marker] payload end_marker``. Without a start marker
    every character between two end markers belongs to a line (auto-start).

    Incoming bytes are decoded incrementally, so neither a line nor a
    multi-byte character has to arrive in one chunk::

        framer = LineIO_LineFramer(FrameConfig(end_marker="\\x03", start_marker="\\x02"))
        framer.processIncomingPacket(b"\\x02i:0\\x03\\x02i", print)   # prints i:0
        framer.processIncomingPacket(b":1\\x03", print)              # prints i:1
    """

    method = "line"

    def __init__(self, frame=None, client=None):
        super().__init__(client)
        self.frame = frame if frame is not None else FrameConfig()
        self._decoder = codecs.getincrementaldecoder(self.frame.encoding)(
            errors=Defaults.EncodingErrors
        )
        self._buffer = []
        self._active = self.auto_start

    @property
    def auto_start(self):
        """Lines start implicitly when no start marker is configured."""
        return self.frame.start_marker is None

    @property
    def chunk_size(self):
        return self.frame.chunk_size

    def isFrameReady(self):
        """Return True while a line is open, i.e. between markers."""
        return self._active and bool(self._buffer)

    def processIncomingPacket(self, data, callback):
        """Feed a chunk of raw bytes, calling ``callback(line)`` per completed line.

        :param data: The most recent chunk, of any size
        :param callback: Called synchronously, in arrival order
        """
        Log.debug("Processing: {}", data, ":hex")
        for c in self._decoder.decode(data):
            if not self._active and c == self.frame.start_marker:
                self._active = True
            elif self._active and c == self.frame.end_marker:
                line = "".join(self._buffer)
                self.advanceFrame()
                callback(line)
            elif self._active:
                self._buffer.append(c)

    def advanceFrame(self):
        """Skip over the current line and wait for the next one."""
        self._buffer = []
        self._active = self.auto_start

    def getRawFrame(self):
        """Return the partial line buffered so far."""
        return "".join(self._buffer)

    def resetFrame(self):
        """Drop any partial line, including undecoded bytes."""
        if self._buffer:
            Log.debug("Dropping partial line: {}", printable(self.getRawFrame()))
        self._decoder.reset()
        self.advanceFrame()

    def buildPacket(self, line):
        """Frame ``line`` with its markers and encode it."""
        start = self.frame.start_marker or ""
        return f"{start}{line}{self.frame.end_marker}".encode(self.frame.encoding)
