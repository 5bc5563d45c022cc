"""Exception types raised by unwatermark."""


class UnwatermarkError(Exception):
    """Base class for all unwatermark errors."""


class InvalidInputError(UnwatermarkError, ValueError):
    """Input bytes could not be decoded as an image or PDF."""


class ProcessingFailure(UnwatermarkError, RuntimeError):
    """Watermark removal failed part way through an image or document."""


class ProcessingCancelled(ProcessingFailure):
    """Document processing was cancelled between pages."""


class StorageError(UnwatermarkError, OSError):
    """Uploaded or processed files could not be read, written or removed."""
