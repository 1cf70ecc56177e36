class JitterError(Exception):
    """Base class for all errors raised by jitterpy."""


class AddressParseError(JitterError, ValueError):

    def __init__(self, text, message=None):
        JitterError.__init__(self, message or "not an IPv4 or IPv6 address: %r" % (text,))
        self.text = text


class DecodeError(JitterError, ValueError):
    pass


class EncodeError(JitterError, ValueError):
    pass


class ConnectionClosedError(JitterError):
    pass


class SocketError(JitterError):
    """An operating system error on a connection's socket.

    The original ``OSError`` (if any) is kept on ``error``.
    """

    def __init__(self, message, error=None):
        JitterError.__init__(self, message)
        self.error = error

    @property
    def errno(self):
        return getattr(self.error, 'errno', None)


class BindError(SocketError):
    pass


class SocketCreateError(BindError):
    pass


class SendError(SocketError):
    pass


class ReceiveError(SocketError):
    pass
