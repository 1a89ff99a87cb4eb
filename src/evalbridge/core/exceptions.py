"""Exceptions raised by evalbridge."""


class EvalBridgeError(Exception):
    """Base class for all evalbridge errors."""

    pass


class BindError(EvalBridgeError):
    """Raised when the listener endpoint cannot be bound."""

    pass


class ResolutionError(EvalBridgeError):
    """Raised when a module identifier cannot be found or evaluated."""

    def __init__(self, identifier: str, reason: str) -> None:
        super().__init__(f"Cannot resolve module {identifier!r}: {reason}")
        self.identifier = identifier
        self.reason = reason


class SerializationError(EvalBridgeError):
    """Raised when serialization or deserialization fails."""

    pass


class TransportError(EvalBridgeError):
    """Raised when a connection drops mid-read or mid-write."""

    pass


class FrameError(TransportError):
    """Raised when a frame is malformed or exceeds the size limit."""

    pass


class RemoteError(EvalBridgeError):
    """Raised by the client when the bridge answers with an error envelope."""

    def __init__(self, error_type: str, message: str) -> None:
        super().__init__(f"{error_type}: {message}")
        self.error_type = error_type
        self.message = message
