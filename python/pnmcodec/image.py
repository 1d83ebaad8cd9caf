"""
PNM Image Types

Decoded image, header descriptor and the minimal interface the encoder
needs from an external image object.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterator, Optional, Protocol, Tuple

if TYPE_CHECKING:
    from .tokens import Variant

RGBA = Tuple[int, int, int, int]


class ColorModel(Enum):
    """Pixel layouts a decoded image can carry."""

    BILEVEL = "bilevel"
    GRAYSCALE = "grayscale"
    RGB = "rgb"

    @property
    def bytes_per_pixel(self) -> int:
        return 3 if self is ColorModel.RGB else 1


class SupportsRGBA(Protocol):
    """Anything the encoder can serialize."""

    width: int
    height: int

    def get_rgba(self, x: int, y: int) -> RGBA:
        ...


@dataclass(frozen=True)
class FormatDescriptor:
    """
    Header fields of a PNM stream.

    Attributes:
        variant: Wire form named by the magic token
        width: Image width in pixels
        height: Image height in pixels
        max_sample: Declared maximum sample value (1 for bilevel variants,
            None when only the dimensions were read)
    """
    variant: 'Variant'
    width: int
    height: int
    max_sample: Optional[int] = None

    @property
    def color_model(self) -> ColorModel:
        return self.variant.color_model


@dataclass(frozen=True)
class DecodedImage:
    """
    Fully materialized image.

    Pixels are stored row-major, one byte per pixel for bilevel (0x00 or
    0xFF) and grayscale, three bytes (R, G, B) per pixel for RGB.
    """
    width: int
    height: int
    color_model: ColorModel
    pixels: bytes

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"image dimensions must be positive, got {self.width}x{self.height}")
        expected = self.width * self.height * self.color_model.bytes_per_pixel
        if len(self.pixels) != expected:
            raise ValueError(
                f"pixel buffer holds {len(self.pixels)} bytes, "
                f"{self.width}x{self.height} {self.color_model.value} needs {expected}"
            )
        if not isinstance(self.pixels, bytes):
            object.__setattr__(self, 'pixels', bytes(self.pixels))

    @property
    def bytes_per_pixel(self) -> int:
        return self.color_model.bytes_per_pixel

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def get_rgba(self, x: int, y: int) -> RGBA:
        """
        Return the pixel at (x, y) as an (R, G, B, A) tuple.

        Bilevel pixels report their value in every channel, alpha included;
        grayscale and RGB pixels are opaque.
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} image")
        bpp = self.bytes_per_pixel
        pos = (y * self.width + x) * bpp
        if self.color_model is ColorModel.RGB:
            r, g, b = self.pixels[pos:pos + 3]
            return r, g, b, 0xFF
        value = self.pixels[pos]
        if self.color_model is ColorModel.BILEVEL:
            return value, value, value, value
        return value, value, value, 0xFF

    def rows(self) -> Iterator[bytes]:
        """Yield the pixel buffer one row at a time."""
        stride = self.width * self.bytes_per_pixel
        for y in range(self.height):
            yield self.pixels[y * stride:(y + 1) * stride]
