"""LineIO Exceptions.

Custom exceptions raised by the framer, the exchange manager and the clients.
"""


class LineIO_Exception(Exception):
    """Base LineIO exception."""

    def __init__(self, string):
        """Initialize the exception.

        :param string: The message to append to the error
        """
        self.string = string
        super().__init__()

    def __str__(self):
        """Return string representation."""
        return f"LineIO Error: {self.string}"

    def isError(self):
        """Error"""
        return True


class LineIO_IOException(LineIO_Exception):
    """Error resulting from data i/o."""

    def __init__(self, string=""):
        """Initialize the exception.

        :param string: The message to append to the error
        """
        self.message = f"[Input/Output] {string}"
        LineIO_Exception.__init__(self, self.message)


class ParameterException(LineIO_Exception):
    """Error resulting from invalid parameter."""

    def __init__(self, string=""):
        """Initialize the exception.

        :param string: The message to append to the error
        """
        message = f"[Invalid Parameter] {string}"
        LineIO_Exception.__init__(self, message)


class ConnectionException(LineIO_Exception):
    """Error resulting from a bad or closed connection."""

    def __init__(self, string=""):
        """Initialize the exception.

        :param string: The message to append to the error
        """
        message = f"[Connection] {string}"
        LineIO_Exception.__init__(self, message)


class ExchangeTimeoutException(LineIO_Exception):
    """No reply arrived before the exchange deadline."""

    def __init__(self, string="", request=None):
        """Initialize the exception.

        :param string: The message to append to the error
        :param request: The request that timed out
        """
        self.request = request
        message = f"[Timeout] {string}"
        LineIO_Exception.__init__(self, message)


# --------------------------------------------------------------------------- #
# Exported symbols
# --------------------------------------------------------------------------- #
__all__ = [
    "LineIO_Exception",
    "LineIO_IOException",
    "ParameterException",
    "ConnectionException",
    "ExchangeTimeoutException",
]
