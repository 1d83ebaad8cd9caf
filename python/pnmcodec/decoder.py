"""
PNM Decoder

Reads the ASCII header shared by all six variants, then the variant's
pixel payload:
- P1/P2/P3: whitespace-separated ASCII samples
- P4: packed bilevel rows, padded to whole bytes
- P5/P6: one byte per sample after a single whitespace separator
"""

import logging
from typing import Callable, Dict, Tuple, Union

from .bitset import Bitset, row_bytes
from .errors import MalformedTokenError, ZeroMaxSampleError
from .image import DecodedImage, FormatDescriptor
from .tokens import MAX_DIMENSION, MAX_SAMPLE_LIMIT, Source, TokenReader, Variant

logger = logging.getLogger(__name__)

OPAQUE = 0xFF
TRANSPARENT = 0x00


def rescale(sample: int, max_sample: int) -> int:
    """
    Map a sample to 8-bit depth: (sample & max_sample) * (255 // max_sample).

    Masking rather than clamping keeps out-of-range samples inside the
    declared range.
    """
    return (sample & max_sample) * (MAX_SAMPLE_LIMIT // max_sample)


def rescale_table(max_sample: int) -> bytes:
    """Translation table applying rescale() to every byte value."""
    return bytes(rescale(s, max_sample) for s in range(256))


class PnmDecoder:
    """Decodes P1-P6 streams into DecodedImage values."""

    def __init__(self):
        self._routines: Dict[Variant, Callable[[TokenReader, FormatDescriptor], bytes]] = {
            Variant.BILEVEL_ASCII: self._decode_p1,
            Variant.GRAYSCALE_ASCII: self._decode_p2,
            Variant.RGB_ASCII: self._decode_p3,
            Variant.BILEVEL_BINARY: self._decode_p4,
            Variant.GRAYSCALE_BINARY: self._decode_p5,
            Variant.RGB_BINARY: self._decode_p6,
        }

    def decode(self, source: Union[Source, TokenReader]) -> DecodedImage:
        """
        Decode a complete image.

        Args:
            source: Binary stream, bytes, or an existing TokenReader

        Returns:
            The decoded image

        Raises:
            PnmError: On any header, token or payload failure
        """
        reader = _as_reader(source)
        header = self._read_header(reader)
        if header.variant.is_binary:
            reader.read_separator()

        pixels = self._routines[header.variant](reader, header)
        image = DecodedImage(header.width, header.height, header.color_model, pixels)
        logger.debug(
            "Decoded %s image %dx%d (max sample %d, %d bytes read)",
            header.variant.magic.decode('ascii'), header.width, header.height,
            header.max_sample, reader.offset,
        )
        return image

    def decode_header(self, source: Union[Source, TokenReader]) -> FormatDescriptor:
        """
        Read the header only: magic, width, height and, for multi-level
        variants, the maximum sample value. The payload is left unread.
        """
        return self._read_header(_as_reader(source))

    def decode_dimensions(self, source: Union[Source, TokenReader]) -> Tuple[int, int]:
        """Read magic, width and height; return (width, height)."""
        reader = _as_reader(source)
        variant = self._read_variant(reader)
        width, height = self._read_dimensions(reader)
        logger.debug("Read %s dimensions %dx%d", variant.magic.decode('ascii'), width, height)
        return width, height

    # Header

    def _read_variant(self, reader: TokenReader) -> Variant:
        return Variant.from_magic(reader.next_token())

    def _read_dimensions(self, reader: TokenReader) -> Tuple[int, int]:
        width = reader.next_uint("width")
        height = reader.next_uint("height")
        if width == 0 or height == 0:
            raise MalformedTokenError(f"image dimensions must be positive, got {width}x{height}")
        if width > MAX_DIMENSION or height > MAX_DIMENSION:
            raise MalformedTokenError(
                f"image dimensions {width}x{height} exceed {MAX_DIMENSION}"
            )
        return width, height

    def _read_max_sample(self, reader: TokenReader) -> int:
        max_sample = reader.next_uint("maxSample")
        if max_sample == 0:
            raise ZeroMaxSampleError("maxSample must be greater than 0")
        if max_sample > MAX_SAMPLE_LIMIT:
            raise MalformedTokenError(
                f"maxSample {max_sample} exceeds {MAX_SAMPLE_LIMIT}; only 8-bit samples are supported"
            )
        return max_sample

    def _read_header(self, reader: TokenReader) -> FormatDescriptor:
        variant = self._read_variant(reader)
        width, height = self._read_dimensions(reader)
        max_sample = self._read_max_sample(reader) if variant.has_max_sample else 1
        return FormatDescriptor(variant, width, height, max_sample)

    # Pixel payloads

    def _decode_p1(self, reader: TokenReader, header: FormatDescriptor) -> bytes:
        pixels = bytearray()
        for _ in range(header.width * header.height):
            value = reader.next_uint("bilevel sample")
            if value > 1:
                raise MalformedTokenError(f"bilevel sample must be 0 or 1, got {value}")
            pixels.append(OPAQUE if value else TRANSPARENT)
        return bytes(pixels)

    def _decode_ascii_samples(self, reader: TokenReader, header: FormatDescriptor, channels: int) -> bytes:
        max_sample = header.max_sample
        count = header.width * header.height * channels
        return bytes(rescale(reader.next_uint("sample"), max_sample) for _ in range(count))

    def _decode_p2(self, reader: TokenReader, header: FormatDescriptor) -> bytes:
        return self._decode_ascii_samples(reader, header, 1)

    def _decode_p3(self, reader: TokenReader, header: FormatDescriptor) -> bytes:
        return self._decode_ascii_samples(reader, header, 3)

    def _decode_p4(self, reader: TokenReader, header: FormatDescriptor) -> bytes:
        width, height = header.width, header.height
        stride = row_bytes(width) * 8
        bits = Bitset.from_bytes(reader.read_raw(row_bytes(width) * height))

        pixels = bytearray(width * height)
        pix = 0
        for y in range(height):
            bit = y * stride
            # Trailing stride - width bits of each row are padding
            for x in range(width):
                pixels[pix] = OPAQUE if bits.test(bit + x) else TRANSPARENT
                pix += 1
        return bytes(pixels)

    def _decode_p5(self, reader: TokenReader, header: FormatDescriptor) -> bytes:
        data = reader.read_raw(header.width * header.height)
        return data.translate(rescale_table(header.max_sample))

    def _decode_p6(self, reader: TokenReader, header: FormatDescriptor) -> bytes:
        data = reader.read_raw(header.width * header.height * 3)
        return data.translate(rescale_table(header.max_sample))


def _as_reader(source: Union[Source, TokenReader]) -> TokenReader:
    if isinstance(source, TokenReader):
        return source
    return TokenReader(source)


def decode_image(source: Union[Source, TokenReader]) -> DecodedImage:
    decoder = PnmDecoder()
    return decoder.decode(source)


def decode_header(source: Union[Source, TokenReader]) -> FormatDescriptor:
    decoder = PnmDecoder()
    return decoder.decode_header(source)


def decode_dimensions(source: Union[Source, TokenReader]) -> Tuple[int, int]:
    decoder = PnmDecoder()
    return decoder.decode_dimensions(source)
