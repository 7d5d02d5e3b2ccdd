"""Heuristic crops for common UI layout areas.

Design screens put navigation in the header, logos/back buttons top-left,
actions top-right, primary content in the center and CTAs in the footer.
Landscape layouts additionally get bottom-right and left/right side panels.

The heuristic table is a plain list of CropRule entries so it can be
inspected and tested without touching the encoder.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, NamedTuple, Union

from ..contracts import CropOptions, CropRegion, EncodeBudget, Region
from ..errors import CropEncodeFailed, SmartImageError
from ..utils.io import sanitize_name
from .encoder import SourceLike, encode_to_fit, source_size
from .geometry import round_half_up

logger = logging.getLogger(__name__)

# A region is kept only if its constraining side reaches this share of min_crop_size
MIN_SIZE_RATIO = 0.5
# Side panels need the image to be at least this many min_crop_sizes wide
SIDE_PANEL_WIDTH_RATIO = 1.5


class NamedRegion(NamedTuple):
    name: str
    region: Region


@dataclass(frozen=True)
class CropRule:
    """One row of the heuristic table: a predicate plus a geometry function.

    Both callables take (width, height, min_crop_size).
    """
    name: str
    geometry: Callable[[int, int, int], Region]
    predicate: Callable[[int, int, int], bool] = lambda w, h, m: True


def _is_landscape(w: int, h: int, m: int) -> bool:
    return w > h


def _has_side_panels(w: int, h: int, m: int) -> bool:
    return w > h and w >= m * SIDE_PANEL_WIDTH_RATIO


def _square_side(w: int, m: int, ratio: float) -> int:
    return min(m, round_half_up(w * ratio))


def _header(w: int, h: int, m: int) -> Region:
    return Region(0, 0, w, min(round_half_up(h * 0.2), m))


def _top_left(w: int, h: int, m: int) -> Region:
    side = _square_side(w, m, 0.4)
    return Region(0, 0, side, side)


def _top_right(w: int, h: int, m: int) -> Region:
    side = _square_side(w, m, 0.4)
    return Region(w - side, 0, side, side)


def _center(w: int, h: int, m: int) -> Region:
    side = min(m, round_half_up(min(w, h) * 0.6))
    return Region(round_half_up((w - side) / 2), round_half_up((h - side) / 2), side, side)


def _footer(w: int, h: int, m: int) -> Region:
    footer_h = min(round_half_up(h * 0.25), m)
    return Region(0, h - footer_h, w, footer_h)


def _bottom_right(w: int, h: int, m: int) -> Region:
    side = _square_side(w, m, 0.3)
    return Region(w - side, h - side, side, side)


def _left_edge(w: int, h: int, m: int) -> Region:
    return Region(0, 0, _square_side(w, m, 0.3), h)


def _right_edge(w: int, h: int, m: int) -> Region:
    side = _square_side(w, m, 0.3)
    return Region(w - side, 0, side, h)


CROP_RULES: List[CropRule] = [
    CropRule("header", _header),
    CropRule("top_left", _top_left),
    CropRule("top_right", _top_right),
    CropRule("center", _center),
    CropRule("footer", _footer),
    CropRule("bottom_right", _bottom_right, _is_landscape),
    CropRule("left_edge", _left_edge, _has_side_panels),
    CropRule("right_edge", _right_edge, _has_side_panels),
]


def plan_crop_regions(
    width: int,
    height: int,
    min_crop_size: int,
    rules: List[CropRule] = CROP_RULES,
) -> List[NamedRegion]:
    """
    Evaluate the heuristic table for an image size.

    Args:
        width: Image width in pixels
        height: Image height in pixels
        min_crop_size: Images smaller than this on either side get no crops
        rules: Heuristic table (default: CROP_RULES)

    Returns:
        NamedRegions in table order, filtered by predicate and minimum size
    """
    if width < min_crop_size or height < min_crop_size:
        return []

    min_side = min_crop_size * MIN_SIZE_RATIO
    planned = []
    for rule in rules:
        if not rule.predicate(width, height, min_crop_size):
            continue
        region = rule.geometry(width, height, min_crop_size)
        if min(region.width, region.height) < min_side:
            continue
        planned.append(NamedRegion(rule.name, region))
    return planned


def generate_crops(
    source: SourceLike,
    output_dir: Union[str, Path],
    budget: EncodeBudget,
    options: CropOptions,
) -> List[CropRegion]:
    """
    Encode every planned heuristic crop of an image.

    A crop that fails to encode is logged and dropped; the rest still run.
    File indices count successful crops only, so they stay contiguous.

    Args:
        source: Path to a raster image, or an open PIL Image
        output_dir: Directory receiving crop_<index>_<name>.<ext> files
        budget: Encode budget applied to each crop as-is
        options: Minimum crop size

    Returns:
        List of CropRegion in table order
    """
    width, height = source_size(source)
    planned = plan_crop_regions(width, height, options.min_crop_size)
    if not planned:
        logger.info(
            "No crops for %dx%d image (min_crop_size=%d)", width, height, options.min_crop_size
        )
        return []

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    crops = []
    for named in planned:
        crop_path = out / f"crop_{len(crops)}_{sanitize_name(named.name)}.{budget.extension}"
        try:
            artifact = encode_to_fit(source, crop_path, budget, region=named.region)
        except (SmartImageError, OSError) as e:
            logger.warning("%s", CropEncodeFailed(named.name, e))
            continue
        crops.append(CropRegion(name=named.name, region=named.region, artifact=artifact))
    return crops
