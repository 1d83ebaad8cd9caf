import pytest

from pnmcodec import ColorModel, DecodedImage


@pytest.fixture
def rgb_image() -> DecodedImage:
    pixels = bytes([
        0, 0, 0, 255, 255, 255, 10, 20, 30,
        200, 100, 50, 1, 2, 3, 128, 64, 32,
    ])
    return DecodedImage(3, 2, ColorModel.RGB, pixels)


@pytest.fixture
def gray_image() -> DecodedImage:
    return DecodedImage(4, 2, ColorModel.GRAYSCALE, bytes([0, 1, 127, 128, 200, 254, 255, 9]))


@pytest.fixture
def bilevel_image() -> DecodedImage:
    return DecodedImage(3, 2, ColorModel.BILEVEL, bytes([0xFF, 0x00, 0xFF, 0x00, 0xFF, 0x00]))
