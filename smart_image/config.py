"""
Configuration for the Smart Image pipeline.

All settings centralized here. Override by creating a Config instance
with custom values.

Usage:
    from smart_image.config import Config, default_config

    # Use defaults
    print(default_config.tile_px)  # 1536

    # Override for a run
    my_config = Config(max_bytes=1_000_000, prefer_format="jpeg")
"""

from dataclasses import dataclass

from .contracts import CropOptions, EncodeBudget, TilingOptions


@dataclass
class Config:
    """
    Central configuration for the Smart Image pipeline.

    Defaults match the limits a vision model accepts for a single image.
    Create a new instance to override any setting.
    """

    # === Directories ===
    output_dir: str = "out/smart_image"

    # === Encode budget ===
    max_bytes: int = 4_000_000      # Per-artifact byte ceiling
    max_long_edge: int = 4096       # Longest side of any artifact, in pixels
    prefer_format: str = "webp"     # "webp" or "jpeg"

    # === Tiling ===
    tile_px: int = 1536
    overlap_px: int = 96

    # === Heuristic crops ===
    include_crops: bool = False
    min_crop_size: int = 768        # Images smaller than this get no crops

    # === Vector rasterization ===
    vector_raster_scale: float = 2.0  # SVG/PDF sources are rendered at 2x

    # === Output Files ===
    manifest_file: str = "manifest.json"
    manifest_version: str = "1.0.0"

    def budget(self) -> EncodeBudget:
        """Encode budget built from the current settings."""
        return EncodeBudget(
            max_bytes=self.max_bytes,
            max_long_edge=self.max_long_edge,
            prefer_format=self.prefer_format,
        )

    def tiling_options(self) -> TilingOptions:
        return TilingOptions(tile_px=self.tile_px, overlap_px=self.overlap_px)

    def crop_options(self) -> CropOptions:
        return CropOptions(min_crop_size=self.min_crop_size)


# Default configuration instance
default_config = Config()
