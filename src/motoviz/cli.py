"""
Interfaz de línea de comandos

Ejemplo:
    python -m motoviz.cli --base motorcycle.jpg --part exhaust \\
        --bike-desc "sport bike with red fairings" \\
        --part-desc "chrome dual exhaust with carbon tips" \\
        --intensity medium --output custom_result.png
"""

import argparse
import asyncio
import logging
import os
import sys

from motoviz.deps import get_customizer
from motoviz.errors import MotovizError
from motoviz.services.regions import (PART_NAMES, Intensity, PartCategory,
                                      parse_intensity, parse_part_category)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Visualize an aftermarket part installed on a motorcycle photo"
    )
    parser.add_argument("-b", "--base", required=True, help="Base motorcycle image path")
    parser.add_argument(
        "-p",
        "--part",
        required=True,
        type=parse_part_category,
        help=f"Part type ({', '.join(c.value for c in PartCategory)})",
    )
    parser.add_argument("-d", "--bike-desc", required=True, help="Bike description")
    parser.add_argument("-P", "--part-desc", required=True, help="Part description")
    parser.add_argument(
        "-i",
        "--intensity",
        type=parse_intensity,
        default=Intensity.MEDIUM,
        help=f"Intensity ({', '.join(i.value for i in Intensity)})",
    )
    parser.add_argument(
        "-m",
        "--mask",
        help="Use this mask image (white = area to regenerate) instead of the part region",
    )
    parser.add_argument("-o", "--output", default="output.png", help="Output path")
    parser.add_argument(
        "--options",
        action="store_true",
        help="Generate one image per intensity instead of a single one",
    )
    return parser


async def run(args: argparse.Namespace) -> int:
    customizer = get_customizer()

    if args.mask or not args.options:
        if args.mask:
            image = await customizer.visualize_customization(
                args.base, args.mask, args.bike_desc, PART_NAMES[args.part], args.part_desc
            )
        else:
            image = await customizer.visualize_custom_part(
                args.base, args.part, args.bike_desc, args.part_desc, args.intensity
            )
        with open(args.output, "wb") as f:
            f.write(image)
        print(f"Saved to: {args.output}")
        return 0

    stem, ext = os.path.splitext(args.output)
    results = await customizer.generate_options(
        args.base, args.part, args.bike_desc, args.part_desc
    )
    failures = 0
    for intensity, outcome in results:
        if not outcome.ok:
            print(f"Failed with {intensity.value} intensity: {outcome.error}")
            failures += 1
            continue
        filename = f"{stem}_{intensity.value}{ext or '.png'}"
        with open(filename, "wb") as f:
            f.write(outcome.image)
        print(f"Saved: {filename}")
    return 1 if results and failures == len(results) else 0


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(run(args))
    except MotovizError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
