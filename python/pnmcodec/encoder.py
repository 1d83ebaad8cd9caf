"""
PNM Encoder

Writes any SupportsRGBA image in one of the six PNM wire forms. Every
variant accepts every image; reducing color to gray or bilevel is lossy.
"""

import io
import logging
from typing import BinaryIO, Callable, Dict, Iterator, List, Optional, Union

from .bitset import Bitset, row_bytes
from .errors import InvalidVariantError
from .image import RGBA, SupportsRGBA
from .tokens import MAX_SAMPLE_LIMIT, Variant

logger = logging.getLogger(__name__)


def _iter_rows(image: SupportsRGBA) -> Iterator[List[RGBA]]:
    for y in range(image.height):
        yield [image.get_rgba(x, y) for x in range(image.width)]


def resolve_variant(variant: Union[Variant, int, str]) -> Variant:
    """
    Normalize a variant given as Variant, magic digit, magic string or name.

    Raises:
        InvalidVariantError: If the value names no variant
    """
    if isinstance(variant, Variant):
        return variant
    # bool is an int subclass; neither it nor floats name a variant
    if isinstance(variant, bool) or not isinstance(variant, (int, str)):
        raise InvalidVariantError(f"invalid PNM variant {variant!r}")
    try:
        if isinstance(variant, str):
            name = variant.strip().upper()
            if name.startswith('P'):
                return Variant.from_magic(name.encode('ascii'))
            return Variant[name]
        return Variant(variant)
    except (ValueError, KeyError, UnicodeEncodeError) as exc:
        raise InvalidVariantError(f"invalid PNM variant {variant!r}") from exc


class PnmEncoder:
    """Serializes images to PNM byte streams."""

    def __init__(self, comment: Optional[str] = None):
        """
        Initialize encoder.

        Args:
            comment: Optional text written as ``#`` comment lines after the
                magic token; ignored by decoders
        """
        self._comment = comment
        self._writers: Dict[Variant, Callable[[SupportsRGBA], bytes]] = {
            Variant.BILEVEL_ASCII: self._encode_p1,
            Variant.GRAYSCALE_ASCII: self._encode_p2,
            Variant.RGB_ASCII: self._encode_p3,
            Variant.BILEVEL_BINARY: self._encode_p4,
            Variant.GRAYSCALE_BINARY: self._encode_p5,
            Variant.RGB_BINARY: self._encode_p6,
        }

    def encode(self, stream: BinaryIO, image: SupportsRGBA, variant: Union[Variant, int, str]) -> int:
        """
        Write image to stream in the requested variant.

        The variant is validated and the whole output is built before the
        first byte reaches the stream.

        Args:
            stream: Binary stream with a write() method
            image: Image to serialize
            variant: Target wire form

        Returns:
            Number of bytes written

        Raises:
            InvalidVariantError: If variant names no PNM variant
        """
        data = self.encode_bytes(image, variant)
        stream.write(data)
        return len(data)

    def encode_bytes(self, image: SupportsRGBA, variant: Union[Variant, int, str]) -> bytes:
        """Return the encoded image as bytes."""
        variant = resolve_variant(variant)
        payload = self._writers[variant](image)
        data = self._header(variant, image) + payload
        logger.debug(
            "Encoded %dx%d image as %s (%d bytes)",
            image.width, image.height, variant.magic.decode('ascii'), len(data),
        )
        return data

    def _header(self, variant: Variant, image: SupportsRGBA) -> bytes:
        lines = [variant.magic]
        if self._comment:
            lines.extend(b'# ' + line.encode('utf-8') for line in self._comment.splitlines())
        lines.append(b'%d %d' % (image.width, image.height))
        if variant.has_max_sample:
            lines.append(b'%d' % MAX_SAMPLE_LIMIT)
        return b'\n'.join(lines) + b'\n'

    # ASCII variants: one text row per image row

    def _ascii_rows(self, image: SupportsRGBA, cell: Callable[[RGBA], str]) -> bytes:
        out = io.StringIO()
        for row in _iter_rows(image):
            out.write(' '.join(cell(px) for px in row))
            out.write('\n')
        return out.getvalue().encode('ascii')

    def _encode_p1(self, image: SupportsRGBA) -> bytes:
        return self._ascii_rows(image, lambda px: '1' if px[0] & 0xFF == 0xFF else '0')

    def _encode_p2(self, image: SupportsRGBA) -> bytes:
        return self._ascii_rows(image, lambda px: str(px[0] & 0xFF))

    def _encode_p3(self, image: SupportsRGBA) -> bytes:
        return self._ascii_rows(
            image, lambda px: f'{px[0] & 0xFF} {px[1] & 0xFF} {px[2] & 0xFF}'
        )

    # Binary variants: raw payload straight after the header

    def _encode_p4(self, image: SupportsRGBA) -> bytes:
        bits = Bitset.for_rows(image.width, image.height)
        stride = row_bytes(image.width) * 8

        for y, row in enumerate(_iter_rows(image)):
            for x, px in enumerate(row):
                if px[0] & 0xFF:
                    bits.set(y * stride + x)
        return bits.to_bytes()

    def _encode_p5(self, image: SupportsRGBA) -> bytes:
        data = bytearray()
        for row in _iter_rows(image):
            data.extend(px[0] & 0xFF for px in row)
        return bytes(data)

    def _encode_p6(self, image: SupportsRGBA) -> bytes:
        data = bytearray()
        for row in _iter_rows(image):
            for r, g, b, _ in row:
                data += bytes((r & 0xFF, g & 0xFF, b & 0xFF))
        return bytes(data)


def encode_image(stream: BinaryIO, image: SupportsRGBA, variant: Union[Variant, int, str]) -> int:
    encoder = PnmEncoder()
    return encoder.encode(stream, image, variant)


def encode_bytes(image: SupportsRGBA, variant: Union[Variant, int, str]) -> bytes:
    encoder = PnmEncoder()
    return encoder.encode_bytes(image, variant)
