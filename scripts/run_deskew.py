"""
Deskew CLI for album page photos.

Runs the rectifier on an image file and writes the corrected page, plus
optional metadata and a debug plot.

Usage:
    # Keep the whole spread
    python scripts/run_deskew.py photo.jpg -o out/spread.png

    # Keep only the left page and write metadata
    python scripts/run_deskew.py photo.jpg -o out/left.png --mode left --metadata out/left.json

    # Tune detection and save a side-by-side plot
    python scripts/run_deskew.py photo.jpg -o out/page.png --max-dimension 640 --plot out/page_debug.png
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from album_vision.common.types import ChannelOrder  # noqa: E402
from album_vision.deskew import DeskewProcessor, RectificationOptions  # noqa: E402
from album_vision.utils.io import load_image, save_image, save_json, save_yaml  # noqa: E402

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Deskew and crop a photographed sticker album page",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_deskew.py photo.jpg -o out/spread.png
  python scripts/run_deskew.py photo.jpg -o out/left.png --mode left --metadata out/left.json
        """,
    )

    parser.add_argument("input", type=Path, help="Photo to rectify")
    parser.add_argument(
        "-o", "--output", type=Path, required=True, help="Where to write the corrected image"
    )
    parser.add_argument(
        "--mode",
        type=str,
        default="spread",
        help="Region to keep: left, right or spread (default: spread)",
    )
    parser.add_argument(
        "--max-dimension", type=int, default=1280, help="Working copy size (default: 1280)"
    )
    parser.add_argument("--edge-low", type=float, default=50.0, help="Canny low threshold")
    parser.add_argument("--edge-high", type=float, default=150.0, help="Canny high threshold")
    parser.add_argument(
        "--min-area",
        type=float,
        default=0.1,
        help="Minimum boundary area as a fraction of the image (default: 0.1)",
    )
    parser.add_argument("--config", type=Path, default=None, help="Custom config.yaml")
    parser.add_argument("--metadata", type=Path, default=None, help="Write result metadata JSON")
    parser.add_argument("--plot", type=Path, default=None, help="Write a debug plot PNG")
    parser.add_argument(
        "--dump-config", type=Path, default=None, help="Write the effective config as YAML"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv=None) -> int:
    """Main entry point for the deskew CLI."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        options = RectificationOptions(
            mode=args.mode,
            max_dimension=args.max_dimension,
            edge_threshold_low=args.edge_low,
            edge_threshold_high=args.edge_high,
            min_boundary_area_fraction=args.min_area,
            channel_order=ChannelOrder.RGBA,
        )
        processor = DeskewProcessor(config_path=args.config)
        image = load_image(args.input, ChannelOrder.RGBA)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 1

    result = processor.process(image, options)
    logger.info(result.get_summary())

    if result.image.size == 0:
        logger.error("Rectifier returned an empty image, nothing written")
        return 1

    save_image(result.image, args.output, ChannelOrder.RGBA)
    logger.info(f"Saved corrected image to {args.output}")

    if args.metadata:
        save_json(result.to_dict(), args.metadata)
        logger.info(f"Saved metadata to {args.metadata}")

    if args.dump_config:
        save_yaml(processor.config.model_dump(), args.dump_config)
        logger.info(f"Saved effective config to {args.dump_config}")

    if args.plot:
        import matplotlib

        matplotlib.use("Agg")
        from album_vision.utils.visualization import plot_rectification

        plot_rectification(image, result, ChannelOrder.RGBA, save_path=args.plot)
        logger.info(f"Saved debug plot to {args.plot}")

    if result.needs_review():
        logger.warning(
            f"Low confidence ({result.confidence:.2f}); consider retaking the photo"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
