"""Encode, tile and crop modules."""

from .encoder import QUALITY_LADDER, SCALE_LADDER, encode_to_fit, source_size
from .tiler import TileCell, compute_tile_grid, generate_tiles
from .cropper import CROP_RULES, CropRule, NamedRegion, generate_crops, plan_crop_regions

__all__ = [
    "QUALITY_LADDER",
    "SCALE_LADDER",
    "encode_to_fit",
    "source_size",
    "TileCell",
    "compute_tile_grid",
    "generate_tiles",
    "CROP_RULES",
    "CropRule",
    "NamedRegion",
    "generate_crops",
    "plan_crop_regions",
]
