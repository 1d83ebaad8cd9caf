"""
PNM - Portable Anymap Codec (P1-P6)
"""

__version__ = "0.1.0"

from .bitset import Bitset
from .decoder import PnmDecoder, decode_dimensions, decode_header, decode_image
from .encoder import PnmEncoder, encode_bytes, encode_image
from .errors import (
    ErrorKind,
    InvalidVariantError,
    MalformedTokenError,
    PnmError,
    TruncatedPayloadError,
    UnknownFormatError,
    ZeroMaxSampleError,
)
from .image import ColorModel, DecodedImage, FormatDescriptor, SupportsRGBA
from .registry import FormatRegistry, default_registry, register_format
from .tokens import TokenReader, Variant

__all__ = [
    "Bitset",
    "ColorModel",
    "DecodedImage",
    "ErrorKind",
    "FormatDescriptor",
    "FormatRegistry",
    "InvalidVariantError",
    "MalformedTokenError",
    "PnmDecoder",
    "PnmEncoder",
    "PnmError",
    "SupportsRGBA",
    "TokenReader",
    "TruncatedPayloadError",
    "UnknownFormatError",
    "Variant",
    "ZeroMaxSampleError",
    "decode_dimensions",
    "decode_header",
    "decode_image",
    "default_registry",
    "encode_bytes",
    "encode_image",
    "register_format",
]
