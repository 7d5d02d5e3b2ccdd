"""Overlapping tile grid over a full image.

Tiles are laid out row-major with a fixed stride (tile_px - overlap_px).
The last column/row is re-anchored to the image edge so every edge tile in a
multi-tile axis is a full tile_px wide/tall instead of a thin remainder.
"""

import logging
import math
from pathlib import Path
from typing import List, NamedTuple, Union

from ..contracts import EncodeBudget, Region, Tile, TilingOptions
from ..errors import InvalidDimensions
from .encoder import SourceLike, encode_to_fit, source_size

logger = logging.getLogger(__name__)


class TileCell(NamedTuple):
    row: int
    col: int
    region: Region


def _axis_count(length: int, tile_px: int, overlap_px: int) -> int:
    stride = tile_px - overlap_px
    return max(1, math.ceil((length - overlap_px) / stride))


def _axis_span(index: int, count: int, length: int, tile_px: int, stride: int):
    """(origin, size) of one tile along a single axis."""
    if index == count - 1 and count > 1:
        origin = max(0, length - tile_px)
        return origin, length - origin
    origin = index * stride
    return origin, min(tile_px, length - origin)


def compute_tile_grid(width: int, height: int, tile_px: int, overlap_px: int) -> List[TileCell]:
    """
    Compute the covering tile grid for an image.

    Args:
        width: Image width in pixels
        height: Image height in pixels
        tile_px: Nominal tile edge length
        overlap_px: Overlap between neighbouring tiles (< tile_px)

    Returns:
        TileCells in row-major order (row outer, col inner)
    """
    if width <= 0 or height <= 0:
        raise InvalidDimensions(f"Invalid image dimensions: {width}x{height}")
    options = TilingOptions(tile_px=tile_px, overlap_px=overlap_px)
    stride = options.stride

    cols = _axis_count(width, tile_px, overlap_px)
    rows = _axis_count(height, tile_px, overlap_px)

    cells = []
    for row in range(rows):
        y, h = _axis_span(row, rows, height, tile_px, stride)
        for col in range(cols):
            x, w = _axis_span(col, cols, width, tile_px, stride)
            cells.append(TileCell(row, col, Region(left=x, top=y, width=w, height=h)))
    return cells


def generate_tiles(
    source: SourceLike,
    output_dir: Union[str, Path],
    budget: EncodeBudget,
    options: TilingOptions,
) -> List[Tile]:
    """
    Split an image into overlapping tiles and encode each one.

    Tiles are never asked to exceed their own nominal size, so each is
    encoded with max_long_edge = min(budget.max_long_edge, tile_px).
    Any fatal encode error aborts the whole grid.

    Args:
        source: Path to a raster image, or an open PIL Image
        output_dir: Directory receiving tile_<row>_<col>.<ext> files
        budget: Encode budget shared by all tiles
        options: Tile size and overlap

    Returns:
        List of Tile in row-major order
    """
    width, height = source_size(source)
    cells = compute_tile_grid(width, height, options.tile_px, options.overlap_px)

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    tile_budget = budget.with_max_long_edge(min(budget.max_long_edge, options.tile_px))

    logger.info(
        "Tiling %dx%d image into %d tiles (tile_px=%d, overlap_px=%d)",
        width, height, len(cells), options.tile_px, options.overlap_px,
    )

    tiles = []
    for cell in cells:
        tile_path = out / f"tile_{cell.row}_{cell.col}.{budget.extension}"
        artifact = encode_to_fit(source, tile_path, tile_budget, region=cell.region)
        tiles.append(Tile(row=cell.row, col=cell.col, region=cell.region, artifact=artifact))
    return tiles
