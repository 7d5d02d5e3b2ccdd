"""Pipeline orchestrator: one source image in, overview + tiles + crops out.

Stages run sequentially so only one image buffer is live at a time:
  rasterize (vector sources only) → overview → tiles → crops → manifest

Usage:
    from smart_image.pipeline import ImagePipeline
    p = ImagePipeline()
    result = p.run("design.svg", output_dir="out/run_001", include_crops=True)

Fatal errors during the overview or tiling abort the run; crop failures
never do.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ..config import Config, default_config
from ..contracts import ResultSet
from ..imaging.cropper import generate_crops
from ..imaging.encoder import encode_to_fit
from ..imaging.tiler import generate_tiles
from ..utils.io import ensure_dir, generate_output_dir, write_manifest
from ..utils.rasterize import get_image_info, is_vector_source, rasterize_vector

logger = logging.getLogger(__name__)


class ImagePipeline:
    """
    Decompose a design image into size-bounded artifacts for a vision model.

    All limits come from the Config; pass a custom one to override.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or default_config

    def _prepare_source(self, source: Path, out: Path, base_name: str) -> Path:
        """Rasterize vector sources once; rasters are used as-is."""
        if not is_vector_source(source):
            return source
        raster = rasterize_vector(
            source,
            out / f"{base_name}.png",
            scale=self.config.vector_raster_scale,
        )
        return Path(raster.path)

    def run(
        self,
        source_path: Union[str, Path],
        output_dir: Optional[Union[str, Path]] = None,
        base_name: Optional[str] = None,
        include_crops: Optional[bool] = None,
        write_manifest_file: bool = True,
    ) -> ResultSet:
        """
        Run the full pipeline on a single source file.

        Args:
            source_path: Raster image, SVG or PDF
            output_dir: Output directory (None = timestamped dir under config.output_dir)
            base_name: Stem for the overview / raster files (default: source stem)
            include_crops: Override config.include_crops for this run
            write_manifest_file: Write manifest.json next to the artifacts

        Returns:
            ResultSet with overview, tiles and crops
        """
        source = Path(source_path)
        if not source.is_file():
            raise FileNotFoundError(f"Source image not found: {source}")

        if include_crops is None:
            include_crops = self.config.include_crops
        base_name = base_name or source.stem

        out = ensure_dir(output_dir or generate_output_dir(self.config.output_dir))
        budget = self.config.budget()

        # --- Stage 1: Raster source ---
        raster_path = self._prepare_source(source, out, base_name)
        raster = get_image_info(raster_path)
        logger.info("Processing %s (%dx%d %s)", source.name, raster.width, raster.height, raster.format)

        # --- Stage 2: Overview ---
        overview = encode_to_fit(
            raster_path,
            out / f"{base_name}_overview.{budget.extension}",
            budget,
        )

        # --- Stage 3: Tiles ---
        tiles = generate_tiles(raster_path, out / "tiles", budget, self.config.tiling_options())

        # --- Stage 4: Crops (optional, never fatal per region) ---
        crops = []
        if include_crops:
            crops = generate_crops(raster_path, out / "crops", budget, self.config.crop_options())

        result = ResultSet(
            overview=overview,
            tiles=tiles,
            crops=crops,
            selected={
                "sourcePath": str(source),
                "sourceFormatUsed": source.suffix.lstrip(".").lower(),
                "rasterPath": str(raster_path),
                "width": raster.width,
                "height": raster.height,
            },
            output_dir=str(out),
        )

        if write_manifest_file:
            manifest_path = write_manifest(
                out / self.config.manifest_file,
                result,
                version=self.config.manifest_version,
            )
            result.manifest_path = str(manifest_path)

        logger.info(
            "Processed %s: overview + %d tiles + %d crops in %s",
            source.name, len(tiles), len(crops), out,
        )
        return result


def run_pipeline(
    source_path: Union[str, Path],
    output_dir: Optional[Union[str, Path]] = None,
    config: Optional[Config] = None,
    **kwargs,
) -> ResultSet:
    """Convenience wrapper around ImagePipeline(config).run()."""
    return ImagePipeline(config=config).run(source_path, output_dir=output_dir, **kwargs)
