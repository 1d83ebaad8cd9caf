import io

import pytest

from pnmcodec import (
    ColorModel,
    DecodedImage,
    InvalidVariantError,
    PnmEncoder,
    Variant,
    decode_image,
    encode_bytes,
    encode_image,
)
from pnmcodec.encoder import resolve_variant


def test_p1_layout(bilevel_image: DecodedImage) -> None:
    assert encode_bytes(bilevel_image, Variant.BILEVEL_ASCII) == b"P1\n3 2\n1 0 1\n0 1 0\n"


def test_p2_layout(gray_image: DecodedImage) -> None:
    assert encode_bytes(gray_image, Variant.GRAYSCALE_ASCII) == (
        b"P2\n4 2\n255\n0 1 127 128\n200 254 255 9\n"
    )


def test_p3_layout(rgb_image: DecodedImage) -> None:
    assert encode_bytes(rgb_image, Variant.RGB_ASCII) == (
        b"P3\n3 2\n255\n0 0 0 255 255 255 10 20 30\n200 100 50 1 2 3 128 64 32\n"
    )


def test_p4_layout() -> None:
    pixels = bytearray(10)
    pixels[0] = pixels[9] = 0xFF
    image = DecodedImage(10, 1, ColorModel.BILEVEL, bytes(pixels))
    assert encode_bytes(image, Variant.BILEVEL_BINARY) == b"P4\n10 1\n\x80\x40"


def test_p5_layout(gray_image: DecodedImage) -> None:
    assert encode_bytes(gray_image, Variant.GRAYSCALE_BINARY) == b"P5\n4 2\n255\n" + gray_image.pixels


def test_p6_layout(rgb_image: DecodedImage) -> None:
    assert encode_bytes(rgb_image, Variant.RGB_BINARY) == b"P6\n3 2\n255\n" + rgb_image.pixels


def test_color_to_gray_uses_red_channel(rgb_image: DecodedImage) -> None:
    data = encode_bytes(rgb_image, Variant.GRAYSCALE_BINARY)
    assert data == b"P5\n3 2\n255\n" + bytes([0, 255, 10, 200, 1, 128])


def test_ascii_bilevel_threshold_is_full_red(gray_image: DecodedImage) -> None:
    data = encode_bytes(gray_image, Variant.BILEVEL_ASCII)
    assert data == b"P1\n4 2\n0 0 0 0\n0 0 1 0\n"


def test_binary_bilevel_threshold_is_nonzero_red(gray_image: DecodedImage) -> None:
    # 0 1 127 128 / 200 254 255 9 -> 0111 / 1111
    data = encode_bytes(gray_image, Variant.BILEVEL_BINARY)
    assert data == b"P4\n4 2\n" + bytes([0b01110000, 0b11110000])


@pytest.mark.parametrize("variant", [Variant.RGB_ASCII, Variant.RGB_BINARY])
def test_rgb_round_trip(rgb_image: DecodedImage, variant: Variant) -> None:
    assert decode_image(encode_bytes(rgb_image, variant)) == rgb_image


@pytest.mark.parametrize("variant", [Variant.GRAYSCALE_ASCII, Variant.GRAYSCALE_BINARY])
def test_gray_round_trip(gray_image: DecodedImage, variant: Variant) -> None:
    assert decode_image(encode_bytes(gray_image, variant)) == gray_image


@pytest.mark.parametrize("variant", [Variant.BILEVEL_ASCII, Variant.BILEVEL_BINARY])
def test_bilevel_round_trip(variant: Variant) -> None:
    for width in range(1, 17):
        pixels = bytes(0xFF if (x * 7) % 3 == 0 else 0x00 for x in range(width * 2))
        image = DecodedImage(width, 2, ColorModel.BILEVEL, pixels)
        assert decode_image(encode_bytes(image, variant)) == image


def test_encode_writes_to_stream(rgb_image: DecodedImage) -> None:
    out = io.BytesIO()
    written = encode_image(out, rgb_image, Variant.RGB_BINARY)
    assert written == len(out.getvalue()) == len(b"P6\n3 2\n255\n") + 18


@pytest.mark.parametrize("variant", [0, 7, -1, "P7", "P9", "bogus", None, 2.5, 2.0, True, False])
def test_invalid_variant_writes_nothing(rgb_image: DecodedImage, variant) -> None:
    out = io.BytesIO()
    with pytest.raises(InvalidVariantError):
        encode_image(out, rgb_image, variant)
    assert out.getvalue() == b""


@pytest.mark.parametrize("value", [Variant.GRAYSCALE_BINARY, 5, "P5", "p5", "grayscale_binary", "GRAYSCALE_BINARY"])
def test_resolve_variant(value) -> None:
    assert resolve_variant(value) is Variant.GRAYSCALE_BINARY


def test_comment_lines_are_written_and_ignored(gray_image: DecodedImage) -> None:
    encoder = PnmEncoder(comment="made by test\nsecond line")
    data = encoder.encode_bytes(gray_image, Variant.GRAYSCALE_BINARY)
    assert data.startswith(b"P5\n# made by test\n# second line\n4 2\n255\n")
    assert decode_image(data) == gray_image


class Checkerboard:
    """Minimal SupportsRGBA implementation."""

    width = 3
    height = 3

    def get_rgba(self, x, y):
        value = 255 if (x + y) % 2 == 0 else 0
        return value, value // 2, 0, 255


def test_encode_any_rgba_source() -> None:
    data = encode_bytes(Checkerboard(), Variant.RGB_BINARY)
    image = decode_image(data)
    assert image.size == (3, 3)
    assert image.get_rgba(0, 0) == (255, 127, 0, 255)
    assert image.get_rgba(1, 0) == (0, 0, 0, 255)


def test_decoded_image_validates_buffer() -> None:
    with pytest.raises(ValueError):
        DecodedImage(2, 2, ColorModel.RGB, bytes(4))
    with pytest.raises(ValueError):
        DecodedImage(0, 2, ColorModel.GRAYSCALE, b"")


def test_decoded_image_rgba_views(bilevel_image: DecodedImage, gray_image: DecodedImage) -> None:
    assert bilevel_image.get_rgba(0, 0) == (255, 255, 255, 255)
    assert bilevel_image.get_rgba(1, 0) == (0, 0, 0, 0)
    assert gray_image.get_rgba(2, 0) == (127, 127, 127, 255)
    with pytest.raises(IndexError):
        gray_image.get_rgba(4, 0)
