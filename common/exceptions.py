"""Custom exception classes for the transfer adapter."""


class FolderstoreError(Exception):
    """
    Base exception class for all adapter errors.
    """
    pass


class ProtocolDecodeError(FolderstoreError):
    """
    Raised when an input line cannot be decoded into a request.
    """
    pass


class InvalidObjectIdError(FolderstoreError, ValueError):
    """
    Raised when an object id is too short to derive a storage path from.
    """
    pass


class TransferFailure(FolderstoreError):
    """
    Raised by a transfer step; carries the code reported back to the caller.
    """

    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class ShortReadError(OSError):
    """
    Raised when the source ends before a non-final block was filled.
    """
    pass
