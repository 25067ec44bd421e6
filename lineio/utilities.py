"""LineIO Utilities.

Shared states and small helpers used across the package.
"""
from .constants import Ascii


class ExchangeState:  # pylint: disable=too-few-public-methods
    """Exchange manager states."""

    IDLE = 0
    WAITING_FOR_REPLY = 1
    CLOSED = 2

    @classmethod
    def to_string(cls, state):
        """Convert to string."""
        states = {
            ExchangeState.IDLE: "IDLE",
            ExchangeState.WAITING_FOR_REPLY: "WAITING_FOR_REPLY",
            ExchangeState.CLOSED: "CLOSED",
        }
        return states.get(state, None)


class ClientState:  # pylint: disable=too-few-public-methods
    """Client lifecycle states. CLOSED is terminal."""

    OPEN = 0
    CLOSING = 1
    CLOSED = 2

    @classmethod
    def to_string(cls, state):
        """Convert to string."""
        states = {
            ClientState.OPEN: "OPEN",
            ClientState.CLOSING: "CLOSING",
            ClientState.CLOSED: "CLOSED",
        }
        return states.get(state, None)


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


def hexlify_packets(packet):
    """Return hex representation of bytestring received.

    :param packet:
    :return:
    """
    if not packet:
        return ""
    return " ".join([hex(int(x)) for x in packet])


def printable(line):
    """Return ``line`` with control characters shown by name, e.g. ``<STX>i:0<ETX>``."""
    names = {value: name for name, value in Ascii.names().items() if name != "TAB"}
    return "".join(f"<{names[c]}>" if c in names else c for c in line)


def parse_marker(value):
    """Normalize a marker given as a character, a control name or a ``\\xNN`` escape.

    :param value: ``"\\x02"``, ``"STX"``, ``"0x02"``, ``"\\\\x02"`` or None
    :returns: A one-character string, or None when ``value`` is None or empty
    :raises ValueError: When the value does not name a single character
    """
    if value is None or value == "":
        return None
    if len(value) == 1:
        return value
    if (char := Ascii.lookup(value)) is not None:
        return char
    text = value.lower()
    for prefix in ("\\x", "0x"):
        if text.startswith(prefix):
            try:
                return chr(int(text[len(prefix):], 16))
            except ValueError as err:
                raise ValueError(f"Invalid marker: {value!r}") from err
    raise ValueError(f"Marker must be a single character: {value!r}")
