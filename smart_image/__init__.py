"""
Smart Image v1.0

Turns a large design asset into size-bounded images a vision model can read:

- Overview: the whole design, compressed to fit the byte budget
- Tiles: an overlapping grid covering the full image at native resolution
- Crops: optional heuristic close-ups (header, center, footer, side panels)

Every artifact goes through the same size-constrained encoder, which lowers
quality first and resolution second until the byte budget is met.
"""

__version__ = "1.0.0"

from .config import Config, default_config
from .contracts import (
    CropOptions,
    CropRegion,
    EncodeBudget,
    EncodedArtifact,
    Region,
    ResultSet,
    Tile,
    TilingOptions,
)
from .errors import CropEncodeFailed, EncodeUnavailable, InvalidDimensions, SmartImageError


def __getattr__(name):
    """Lazy imports so contracts/config can be used without Pillow or fitz loaded."""

    _imaging_names = {
        "encode_to_fit", "generate_tiles", "generate_crops",
        "compute_tile_grid", "plan_crop_regions",
    }
    _pipeline_names = {"ImagePipeline", "run_pipeline"}

    if name in _imaging_names:
        from . import imaging
        return getattr(imaging, name)
    elif name in _pipeline_names:
        from . import pipeline
        return getattr(pipeline, name)

    raise AttributeError(f"module 'smart_image' has no attribute {name!r}")
