"""
Command-line launcher for Translucify.

Makes the background of one or more images transparent by flood filling
from a seed pixel (top-left corner by default) and writes PNG results.

Usage:
    python translucify.py logo.png badge.jpg --tolerance 0.1 --output-dir out
    python translucify.py --job Jobs/logos.tljob --threads
"""

from pathlib import Path
from typing import List, Optional
import argparse
import logging
import sys

from TL_Libs.constants import (
    DEFAULT_OUTPUT_TEMPLATE,
    DEFAULT_SEED_X,
    DEFAULT_SEED_Y,
    DEFAULT_TOLERANCE,
    FIELD_IMAGE_PATHS,
    FIELD_OUTPUT_DIR,
    FIELD_OUTPUT_PATH,
    FIELD_OVERWRITE,
    FIELD_SEED_X,
    FIELD_SEED_Y,
    FIELD_TOLERANCE,
)
from TL_Libs.ProjStoreLib.batch_runner import run_batch_job
from TL_Libs.ProjStoreLib.job_store import load_job_data

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger("translucify")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="translucify",
        description="Make the background region of images transparent.",
    )
    parser.add_argument("images", nargs="*", type=Path, help="Images to process")
    parser.add_argument("--job", type=Path, help="Run the images and settings of a .tljob file")
    parser.add_argument(
        "--tolerance",
        type=float,
        default=DEFAULT_TOLERANCE,
        help=f"Relative per-channel color tolerance (default {DEFAULT_TOLERANCE})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        nargs=2,
        metavar=("X", "Y"),
        default=(DEFAULT_SEED_X, DEFAULT_SEED_Y),
        help="Pixel the fill starts from (default 0 0)",
    )
    parser.add_argument("--output-dir", type=Path, default=Path("output"), help="Directory for results")
    parser.add_argument(
        "--output-path",
        default=DEFAULT_OUTPUT_TEMPLATE,
        help="Output filename template; tags {NAME}, {DATE}, {TIME}, {COUNTER}",
    )
    parser.add_argument("--overwrite", action="store_true", help="Replace existing output files")
    parser.add_argument("--threads", action="store_true", help="Process images in parallel")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
    )

    if args.job is None and not args.images:
        parser.error("give at least one image or --job")

    if args.tolerance < 0:
        parser.error("--tolerance must be >= 0")

    base_dir: Optional[Path] = None
    if args.job is not None:
        try:
            job = load_job_data(args.job)
        except (OSError, ValueError) as e:
            logger.error(f"Cannot load job file: {e}")
            return 1
        # Relative paths inside a job file are relative to the file itself
        base_dir = args.job.parent
    else:
        job = {
            FIELD_IMAGE_PATHS: [str(path) for path in args.images],
            FIELD_TOLERANCE: args.tolerance,
            FIELD_SEED_X: args.seed[0],
            FIELD_SEED_Y: args.seed[1],
            FIELD_OUTPUT_DIR: str(args.output_dir),
            FIELD_OUTPUT_PATH: args.output_path,
            FIELD_OVERWRITE: args.overwrite,
        }

    try:
        result = run_batch_job(job, use_threading=args.threads, base_dir=base_dir)
    except ValueError as e:
        logger.error(f"Invalid batch settings: {e}")
        return 1

    for source, output in sorted(result.saved.items()):
        print(f"{source} -> {output}")
    for source, error in sorted(result.failed.items()):
        print(f"{source}: FAILED ({error})", file=sys.stderr)

    return 0 if result.succeeded else 1


if __name__ == "__main__":
    sys.exit(main())
