"""Size-constrained image encoder.

Searches a quality/resolution space until the encoded artifact fits a byte
budget:

  1. Quality phase: at the initial scale (long edge clamped to the budget),
     walk the quality ladder 95 -> 20.
  2. Scale phase: only if nothing fit, walk the scale ladder 0.9 -> 0.2 and
     repeat the full quality ladder at each step.

Quality is sacrificed before resolution because UI imagery degrades more
gracefully under compression than under downscaling.

Usage:
    from smart_image.imaging.encoder import encode_to_fit
    from smart_image.contracts import EncodeBudget, Region

    budget = EncodeBudget(max_bytes=4_000_000, max_long_edge=4096)
    artifact = encode_to_fit("design.png", "out/design_overview", budget)
    tile = encode_to_fit("design.png", "out/tiles/tile_0_0", budget,
                         region=Region(0, 0, 1536, 1536))
"""

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from PIL import Image

from ..contracts import EncodeBudget, EncodedArtifact, Region
from ..errors import EncodeUnavailable, InvalidDimensions
from .geometry import fit_scale, scaled_size

logger = logging.getLogger(__name__)

SourceLike = Union[str, Path, Image.Image]

# Search ladders. Order matters: the first attempt under budget wins.
QUALITY_LADDER: List[int] = [95, 90, 85, 80, 75, 70, 65, 60, 55, 50, 45, 40, 35, 30, 25, 20]
SCALE_LADDER: List[float] = [0.9, 0.8, 0.7, 0.6, 0.5, 0.4, 0.3, 0.25, 0.2]

# Pillow raises these for corrupt pixel data and unsupported modes/options
ATTEMPT_ERRORS = (OSError, ValueError)

JPEG_BACKGROUND = (255, 255, 255)
WEBP_METHOD = 4  # 0 (fast) .. 6 (small)
JPEG_OPTIMIZE = True


@dataclass
class _Attempt:
    data: bytes
    width: int
    height: int
    quality: int
    scale_factor: float

    @property
    def size(self) -> int:
        return len(self.data)


def _prepare_mode(image: Image.Image, fmt: str) -> Image.Image:
    """Convert to a pixel mode the target format can store."""
    has_alpha = image.mode in ("RGBA", "LA", "PA") or (
        image.mode == "P" and "transparency" in image.info
    )
    if fmt == "jpeg":
        if has_alpha:
            rgba = image.convert("RGBA")
            flattened = Image.new("RGB", rgba.size, JPEG_BACKGROUND)
            flattened.paste(rgba, mask=rgba.getchannel("A"))
            return flattened
        return image if image.mode == "RGB" else image.convert("RGB")

    if image.mode in ("RGB", "RGBA"):
        return image
    return image.convert("RGBA" if has_alpha else "RGB")


def _encode_once(
    frame: Image.Image,
    fmt: str,
    quality: int,
    webp_method: int = WEBP_METHOD,
    jpeg_optimize: bool = JPEG_OPTIMIZE,
) -> Tuple[bytes, int, int]:
    """
    Encode a frame into memory at one quality level.

    Returns:
        (encoded bytes, width, height) with the dimensions read back from
        the encoded data
    """
    buffer = io.BytesIO()
    if fmt == "webp":
        frame.save(buffer, format="WEBP", quality=quality, method=webp_method)
    else:
        frame.save(buffer, format="JPEG", quality=quality, optimize=jpeg_optimize)
    data = buffer.getvalue()

    with Image.open(io.BytesIO(data)) as encoded:
        width, height = encoded.size
    return data, width, height


class _EncodeSearch:
    """Mutable state of one encode_to_fit() call."""

    def __init__(
        self,
        image: Image.Image,
        region: Optional[Region],
        budget: EncodeBudget,
        webp_method: int,
        jpeg_optimize: bool,
    ):
        self.image = image
        self.region = region
        self.budget = budget
        self.webp_method = webp_method
        self.jpeg_optimize = jpeg_optimize
        self.best: Optional[_Attempt] = None
        self.attempts = 0
        self.failures = 0
        self._working: Optional[Image.Image] = None

    @property
    def fits(self) -> bool:
        return self.best is not None and self.best.size <= self.budget.max_bytes

    def working_image(self) -> Image.Image:
        """Decode the source (or its region) once, in a format-ready mode."""
        if self._working is None:
            if self.region is not None:
                cropped = self.image.crop(self.region.box)
            else:
                self.image.load()
                cropped = self.image
            self._working = _prepare_mode(cropped, self.budget.prefer_format)
        return self._working

    def _record(self, attempt: _Attempt) -> None:
        if self.best is None or attempt.size < self.best.size:
            self.best = attempt

    def run_quality_ladder(self, scale: float) -> bool:
        """
        Try every quality level at one scale factor.

        Stops at the first attempt under budget. An encode/decode error
        aborts the rest of this ladder, keeping the best result so far.

        Returns:
            True if an attempt met the budget
        """
        frame = None
        for quality in QUALITY_LADDER:
            self.attempts += 1
            try:
                if frame is None:
                    working = self.working_image()
                    size = scaled_size(working.width, working.height, scale)
                    if size == working.size:
                        frame = working
                    else:
                        frame = working.resize(size, Image.Resampling.LANCZOS)
                data, width, height = _encode_once(
                    frame,
                    self.budget.prefer_format,
                    quality,
                    webp_method=self.webp_method,
                    jpeg_optimize=self.jpeg_optimize,
                )
            except ATTEMPT_ERRORS as e:
                self.failures += 1
                logger.debug("Encode attempt failed (scale=%.3f, quality=%d): %s", scale, quality, e)
                break

            attempt = _Attempt(data, width, height, quality, scale)
            logger.debug(
                "Attempt scale=%.3f quality=%d -> %d bytes (%dx%d)",
                scale, quality, attempt.size, width, height,
            )
            self._record(attempt)
            if attempt.size <= self.budget.max_bytes:
                return True
        return False


def _resolve_output_path(output_path: Union[str, Path], extension: str) -> Path:
    path = Path(output_path)
    if not str(path).endswith(f".{extension}"):
        path = path.with_name(f"{path.name}.{extension}")
    return path


def _open_source(source: SourceLike) -> Image.Image:
    if isinstance(source, Image.Image):
        return source
    path = Path(source)
    if not path.is_file():
        raise FileNotFoundError(f"Source image not found: {path}")
    try:
        return Image.open(path)
    except ATTEMPT_ERRORS as e:
        raise EncodeUnavailable(f"Cannot decode source image {path}: {e}") from e


def source_size(source: SourceLike) -> Tuple[int, int]:
    """(width, height) of a source without decoding its pixels."""
    if isinstance(source, Image.Image):
        return source.size
    image = _open_source(source)
    try:
        return image.size
    finally:
        image.close()


def encode_to_fit(
    source: SourceLike,
    output_path: Union[str, Path],
    budget: EncodeBudget,
    region: Optional[Region] = None,
    webp_method: int = WEBP_METHOD,
    jpeg_optimize: bool = JPEG_OPTIMIZE,
) -> EncodedArtifact:
    """
    Encode an image (or a sub-rectangle of it) to best satisfy a byte budget.

    The smallest artifact found in search order is returned even when it is
    still over budget; callers needing a hard guarantee must compare
    artifact.bytes with budget.max_bytes themselves.

    Args:
        source: Path to a raster image, or an open PIL Image
        output_path: Destination path; the format extension is appended when missing
        budget: Byte / long-edge / format budget
        region: Optional sub-rectangle; every attempt works on this crop only
        webp_method: WebP encoder effort (0-6)
        jpeg_optimize: Run the extra JPEG Huffman optimization pass

    Returns:
        EncodedArtifact describing the file actually written

    Raises:
        InvalidDimensions: If the source or region has zero width/height or
            the region falls outside the source
        EncodeUnavailable: If the source cannot be decoded or every attempt failed
    """
    image = _open_source(source)
    try:
        src_w, src_h = image.size
        if src_w <= 0 or src_h <= 0:
            raise InvalidDimensions(f"Invalid image dimensions: {src_w}x{src_h}")

        if region is not None:
            if not region.fits_within(src_w, src_h):
                raise InvalidDimensions(
                    f"Region {region.box} does not fit inside a {src_w}x{src_h} image"
                )
            width, height = region.width, region.height
        else:
            width, height = src_w, src_h

        search = _EncodeSearch(image, region, budget, webp_method, jpeg_optimize)

        # Quality phase
        scale_factor = fit_scale(width, height, budget.max_long_edge)
        search.run_quality_ladder(scale_factor)

        # Scale phase
        if not search.fits:
            for candidate in SCALE_LADDER:
                scale_factor = min(scale_factor, candidate)
                if search.run_quality_ladder(scale_factor):
                    break
    finally:
        if image is not source:
            image.close()

    best = search.best
    if best is None:
        raise EncodeUnavailable(
            f"Failed to encode image to meet size constraint of {budget.max_bytes} bytes "
            f"({search.failures} failed attempts)"
        )

    path = _resolve_output_path(output_path, budget.extension)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(best.data)
    written_bytes = path.stat().st_size

    if written_bytes > budget.max_bytes:
        # Soft failure: the oversized artifact is still returned.
        logger.warning(
            "%s is %d bytes, over the %d byte budget even at quality %d / scale %.2f",
            path, written_bytes, budget.max_bytes, best.quality, best.scale_factor,
        )
    else:
        logger.info(
            "Encoded %s: %dx%d, %d bytes (quality %d, scale %.3f, %d attempts)",
            path, best.width, best.height, written_bytes,
            best.quality, best.scale_factor, search.attempts,
        )

    return EncodedArtifact(
        path=str(path),
        bytes=written_bytes,
        width=best.width,
        height=best.height,
        format=budget.prefer_format,
        quality=best.quality,
        scale_factor=best.scale_factor,
    )
