"""
PNM CLI Converter

Usage:
    pnmconvert input.ppm output.pgm --to P5
    pnmconvert --info input.pbm
    pnmconvert photo.png output.ppm --to rgb_binary
    cat input.pnm | pnmconvert - - --to P3 > output.ppm
"""

import argparse
import io
import logging
import sys
from pathlib import Path
from typing import List, Optional

from PIL import Image, UnidentifiedImageError

from .decoder import PnmDecoder
from .encoder import PnmEncoder, resolve_variant
from .errors import UnknownFormatError
from .image import DecodedImage
from .pillow import from_pil, to_pil
from .registry import FormatRegistry, register_format
from .tokens import Variant

logger = logging.getLogger(__name__)

PNM_SUFFIXES = {'.pbm', '.pgm', '.ppm', '.pnm'}

VARIANT_CHOICES = ', '.join(
    f'{v.magic.decode("ascii")}/{v.name.lower()}' for v in Variant
)


def _read_input(path: str) -> bytes:
    if path == '-':
        return sys.stdin.buffer.read()
    with open(path, 'rb') as f:
        return f.read()


def load_image(data: bytes, registry: FormatRegistry) -> DecodedImage:
    """Decode PNM data, falling back to Pillow for any other image format."""
    stream = io.BytesIO(data)
    if registry.sniff(stream) is not None:
        return registry.decode(stream)
    try:
        with Image.open(stream) as img:
            logger.info("Reading %s image through Pillow", img.format)
            return from_pil(img)
    except UnidentifiedImageError as exc:
        raise UnknownFormatError("input is neither PNM nor an image format Pillow recognizes") from exc


def show_info(data: bytes) -> None:
    header = PnmDecoder().decode_header(data)
    print(f"Format:     {header.variant.magic.decode('ascii')} ({header.variant.name.lower()})")
    print(f"Size:       {header.width} x {header.height}")
    print(f"Color:      {header.color_model.value}")
    print(f"Max sample: {header.max_sample}")


def convert(args: argparse.Namespace) -> None:
    data = _read_input(args.input)
    registry = FormatRegistry()
    register_format(registry)
    image = load_image(data, registry)

    if args.to:
        variant = resolve_variant(args.to)
    elif registry.sniff(io.BytesIO(data)) is not None:
        variant = PnmDecoder().decode_header(data).variant
    else:
        variant = Variant.RGB_BINARY

    if args.output != '-' and Path(args.output).suffix.lower() not in PNM_SUFFIXES:
        to_pil(image).save(args.output)
        logger.info("Wrote %s through Pillow", args.output)
        return

    encoder = PnmEncoder(comment=args.comment)
    encoded = encoder.encode_bytes(image, variant)
    if args.output == '-':
        sys.stdout.buffer.write(encoded)
        sys.stdout.buffer.flush()
    else:
        with open(args.output, 'wb') as f:
            f.write(encoded)

    logger.info(
        "Converted %dx%d image to %s: %s bytes",
        image.width, image.height, variant.magic.decode('ascii'), f'{len(encoded):,}',
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='pnmconvert',
        description='Convert between PNM variants (P1-P6)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Variants: {VARIANT_CHOICES}

Examples:
  pnmconvert image.ppm image.pgm --to P5
  pnmconvert --info image.pbm
  pnmconvert image.ppm image.png
"""
    )

    parser.add_argument('input', help="Input file ('-' for stdin)")
    parser.add_argument('output', nargs='?', help="Output file ('-' for stdout)")
    parser.add_argument('--to', metavar='VARIANT',
                        help='Output variant (default: same as input)')
    parser.add_argument('--info', action='store_true',
                        help='Print header information and exit')
    parser.add_argument('--comment', help='Comment written into the output header')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log debug output')
    parser.add_argument('-q', '--quiet', action='store_true', help='Log errors only')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')

    if not args.info and not args.output:
        parser.print_usage(sys.stderr)
        print('pnmconvert: error: an output path is required unless --info is given', file=sys.stderr)
        return 2

    try:
        if args.info:
            show_info(_read_input(args.input))
        else:
            convert(args)
    except (ValueError, OSError) as exc:
        print(f'pnmconvert: {exc}', file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
