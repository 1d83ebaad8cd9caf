"""
PNM Codec Errors

Every failure raised by the decoder, encoder and registry is a PnmError.
PnmError subclasses ValueError, so callers that already guard codec calls
with ``except ValueError`` keep working.
"""

from enum import Enum


class ErrorKind(Enum):
    """Failure categories reported by the codec."""

    UNKNOWN_FORMAT = "unknown format"
    MALFORMED_TOKEN = "malformed token"
    TRUNCATED_PAYLOAD = "truncated payload"
    ZERO_MAX_SAMPLE = "zero max sample"
    INVALID_VARIANT = "invalid variant"


class PnmError(ValueError):
    """
    Base class for codec errors.

    Attributes:
        kind: The ErrorKind of this failure
    """

    kind: ErrorKind

    def __str__(self) -> str:
        message = super().__str__()
        cause = self.__cause__
        if cause is not None and str(cause):
            return f"{self.kind.value}: {message}: {cause}"
        return f"{self.kind.value}: {message}"


class UnknownFormatError(PnmError):
    """Magic token is not one of P1-P6."""
    kind = ErrorKind.UNKNOWN_FORMAT


class MalformedTokenError(PnmError):
    """A token could not be read or parsed where a value was expected."""
    kind = ErrorKind.MALFORMED_TOKEN


class TruncatedPayloadError(PnmError):
    """The stream ended before the binary payload was complete."""
    kind = ErrorKind.TRUNCATED_PAYLOAD


class ZeroMaxSampleError(PnmError):
    """The header declared a maximum sample value of 0."""
    kind = ErrorKind.ZERO_MAX_SAMPLE


class InvalidVariantError(PnmError):
    """Encoding was requested for an unrecognized variant."""
    kind = ErrorKind.INVALID_VARIANT
