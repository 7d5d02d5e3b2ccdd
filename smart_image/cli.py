"""Command-line entry point.

Usage:
    smart-image design.png --out out/run_001 --crops
    python -m smart_image.cli design.svg --max-bytes 1000000 --format jpeg
"""

import argparse
import logging
import sys

from .config import Config, default_config
from .contracts import ResultSet
from .errors import SmartImageError
from .pipeline import ImagePipeline
from .utils.io import format_bytes, get_display_path


def format_summary(result: ResultSet) -> str:
    """Human-readable summary of a pipeline run."""
    overview = result.overview
    lines = [
        "Successfully processed design",
        "",
        f"Source: {result.selected.get('sourcePath', '?')}",
        f"Source format: {result.selected.get('sourceFormatUsed', '?')}",
        "",
        "Overview:",
        f"  Path: {get_display_path(overview.path)}",
        f"  Size: {overview.width}x{overview.height}",
        f"  Bytes: {format_bytes(overview.bytes)}",
        f"  Format: {overview.format} (quality: {overview.quality})",
        "",
        f"Tiles: {len(result.tiles)}",
    ]
    for tile in result.tiles:
        lines.append(
            f"  {get_display_path(tile.artifact.path)}: {tile.artifact.width}x{tile.artifact.height} "
            f"at ({tile.region.left},{tile.region.top}) - {format_bytes(tile.artifact.bytes)}"
        )
    if result.crops:
        lines.append("")
        lines.append(f"Crops: {len(result.crops)}")
        for crop in result.crops:
            lines.append(
                f"  {get_display_path(crop.artifact.path)}: {crop.name} - "
                f"{crop.artifact.width}x{crop.artifact.height} - {format_bytes(crop.artifact.bytes)}"
            )
    if result.manifest_path:
        lines.append("")
        lines.append(f"Manifest: {get_display_path(result.manifest_path)}")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Split a design image into size-bounded overview, tiles and crops"
    )
    parser.add_argument("source", help="Path to a PNG/JPG/WebP raster or an SVG/PDF")
    parser.add_argument("--out", help="Output directory (default: timestamped dir)")
    parser.add_argument("--base-name", help="File stem for the overview (default: source stem)")
    parser.add_argument("--max-bytes", type=int, default=default_config.max_bytes,
                        help="Maximum size of each image in bytes")
    parser.add_argument("--max-long-edge", type=int, default=default_config.max_long_edge,
                        help="Maximum long edge of each image in pixels")
    parser.add_argument("--tile-px", type=int, default=default_config.tile_px, help="Tile size")
    parser.add_argument("--overlap-px", type=int, default=default_config.overlap_px,
                        help="Overlap between tiles")
    parser.add_argument("--format", choices=["webp", "jpeg"], default=default_config.prefer_format,
                        help="Output format for processed images")
    parser.add_argument("--crops", action="store_true", help="Generate heuristic crops")
    parser.add_argument("--min-crop-size", type=int, default=default_config.min_crop_size,
                        help="Images smaller than this get no crops")
    parser.add_argument("--no-manifest", action="store_true", help="Skip writing manifest.json")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        config = Config(
            max_bytes=args.max_bytes,
            max_long_edge=args.max_long_edge,
            tile_px=args.tile_px,
            overlap_px=args.overlap_px,
            prefer_format=args.format,
            include_crops=args.crops,
            min_crop_size=args.min_crop_size,
        )
        result = ImagePipeline(config).run(
            args.source,
            output_dir=args.out,
            base_name=args.base_name,
            write_manifest_file=not args.no_manifest,
        )
    except (SmartImageError, ValueError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(format_summary(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
