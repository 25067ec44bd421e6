class LineIO_Framer:
    def __init__(self, client=None):
        self.client = client

    def sendPacket(self, message):
        return self.client.send(message)

    def recvPacket(self, size):
        return self.client.recv(size)


from .line_framer import LineIO_LineFramer  # noqa: E402

__all__ = ["LineIO_Framer", "LineIO_LineFramer"]
