"""
Pillow Adapter

Converts between DecodedImage and PIL.Image.Image so images loaded or
produced by Pillow can pass through the codec.
"""

from PIL import Image

from .image import ColorModel, DecodedImage

_PIL_MODES = {
    ColorModel.BILEVEL: 'L',
    ColorModel.GRAYSCALE: 'L',
    ColorModel.RGB: 'RGB',
}


def from_pil(img: Image.Image) -> DecodedImage:
    """
    Build a DecodedImage from a Pillow image.

    Mode ``1`` becomes bilevel (0x00/0xFF), ``L`` grayscale; every other
    mode is converted to RGB, dropping alpha.
    """
    width, height = img.size
    if img.mode == '1':
        return DecodedImage(width, height, ColorModel.BILEVEL, img.convert('L').tobytes())
    if img.mode == 'L':
        return DecodedImage(width, height, ColorModel.GRAYSCALE, img.tobytes())
    return DecodedImage(width, height, ColorModel.RGB, img.convert('RGB').tobytes())


def to_pil(image: DecodedImage) -> Image.Image:
    """Return a Pillow image (``L`` or ``RGB``) holding the same pixels."""
    return Image.frombytes(_PIL_MODES[image.color_model], image.size, image.pixels)
