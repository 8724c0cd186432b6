"""
Main entry point for the Gallery Tagger.
"""

import sys
import argparse
from typing import List, Optional
from .config import settings
from .logging import setup_logging, get_logger
from .optimizer import GalleryOptimizer
from .processor import GalleryProcessor, ProcessorError


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Gallery Tagger - AI vehicle identification for the photo gallery"
    )

    parser.add_argument(
        "--mode",
        choices=["tag", "optimize", "all"],
        default="tag",
        help="tag: identify and copy photos, optimize: build responsive variants, all: both (default: tag)"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help=f"Verbose logging, also appended to {settings.debug_log_file}"
    )

    parser.add_argument("--input-dir", help="Override the folder of photos to tag")
    parser.add_argument("--output-dir", help="Override the folder recognised photos are copied to")
    parser.add_argument("--output-html", help="Override the gallery HTML output path")
    parser.add_argument("--model", help="Override the vision model (e.g. gpt-4o-mini)")

    return parser.parse_args(argv)


def apply_overrides(args) -> None:
    """Apply command line overrides to the global settings."""
    if args.input_dir:
        settings.input_dir = args.input_dir
    if args.output_dir:
        settings.output_dir = args.output_dir
    if args.output_html:
        settings.output_html = args.output_html
    if args.model:
        settings.model = args.model


def run_tagging() -> None:
    """Tag the gallery photos and write the HTML fragment."""
    with GalleryProcessor() as processor:
        processor.run()


def run_optimizer() -> None:
    """Build responsive variants of the processed photos."""
    GalleryOptimizer().run()


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    args = parse_arguments(argv)

    if args.debug:
        setup_logging("DEBUG", settings.debug_log_file)
    else:
        setup_logging()
    logger = get_logger("main")

    apply_overrides(args)
    logger.info(f"🔧 Starting gallery tagger in {args.mode} mode")

    try:
        if args.mode in ("tag", "all"):
            run_tagging()
        if args.mode in ("optimize", "all"):
            run_optimizer()
        return 0

    except ProcessorError as e:
        logger.error(f"❌ {str(e)}")
        return 1
    except KeyboardInterrupt:
        logger.info("⏹️  Interrupted by user")
        return 1
    except Exception:
        logger.exception(f"❌ Fatal error in {args.mode} mode")
        return 1


if __name__ == "__main__":
    sys.exit(main())
