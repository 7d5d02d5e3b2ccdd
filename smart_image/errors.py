"""Error taxonomy for the encode / tile / crop pipeline."""


class SmartImageError(Exception):
    """Base class for all pipeline errors."""


class InvalidDimensions(SmartImageError, ValueError):
    """Source or region resolves to zero width/height, or lies outside the source."""


class EncodeUnavailable(SmartImageError, RuntimeError):
    """Every attempt of the encode search failed, or the source cannot be decoded."""


class CropEncodeFailed(SmartImageError):
    """A heuristic crop could not be encoded. Logged and dropped, never raised."""

    def __init__(self, name: str, cause: BaseException):
        self.name = name
        self.cause = cause
        super().__init__(f"Failed to generate crop {name!r}: {cause}")
