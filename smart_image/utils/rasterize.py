"""
Vector Rasterization Utilities

Renders SVG (and PDF) sources to PNG so the encoder always works on pixels.
Uses PyMuPDF (fitz) for rendering. Vector sources are rendered once at a
fixed upscale (2x by default) before any encode search runs.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import fitz  # PyMuPDF
from PIL import Image

from ..config import default_config
from ..errors import EncodeUnavailable, InvalidDimensions

logger = logging.getLogger(__name__)

VECTOR_SUFFIXES = (".svg", ".pdf")


@dataclass
class RasterInfo:
    """Container for a raster file with its pixel size."""
    path: str
    width: int
    height: int
    format: Optional[str] = None  # Pillow format name, e.g. "PNG"


def is_vector_source(path: Union[str, Path]) -> bool:
    """True for sources that must be rasterized before encoding."""
    return Path(path).suffix.lower() in VECTOR_SUFFIXES


def get_image_info(image_path: Union[str, Path]) -> RasterInfo:
    """
    Read width, height and format of a raster without decoding pixels.

    Raises:
        FileNotFoundError: If the path does not point to a file
        EncodeUnavailable: If Pillow cannot identify the file
    """
    path = Path(image_path)
    if not path.is_file():
        raise FileNotFoundError(f"Image not found: {path}")
    try:
        with Image.open(path) as img:
            width, height = img.size
            fmt = img.format
    except (OSError, ValueError) as e:
        raise EncodeUnavailable(f"Cannot identify image {path}: {e}") from e
    return RasterInfo(path=str(path), width=width, height=height, format=fmt)


def rasterize_vector(
    source_path: Union[str, Path],
    output_path: Union[str, Path],
    scale: float = default_config.vector_raster_scale,
    page_num: int = 1,
) -> RasterInfo:
    """
    Render a vector document page to a PNG file.

    Args:
        source_path: Path to the SVG or PDF file
        output_path: Destination PNG path
        scale: Upscale factor applied to the document's native size
        page_num: Page number (1-based); SVGs have a single page

    Returns:
        RasterInfo for the written PNG

    Raises:
        FileNotFoundError: If source_path does not exist
        EncodeUnavailable: If PyMuPDF cannot open or render the document
        InvalidDimensions: If the rendered page has zero width or height
    """
    src = Path(source_path)
    if not src.is_file():
        raise FileNotFoundError(f"Vector source not found: {src}")
    if scale <= 0:
        raise ValueError(f"scale must be positive, got {scale}")

    try:
        doc = fitz.open(str(src))
    except (RuntimeError, ValueError) as e:
        raise EncodeUnavailable(f"Cannot open vector source {src}: {e}") from e

    try:
        total_pages = len(doc)
        if page_num < 1 or page_num > total_pages:
            raise ValueError(f"Page {page_num} out of range ({src.name} has {total_pages} pages)")
        page = doc.load_page(page_num - 1)
        keep_alpha = src.suffix.lower() == ".svg"
        try:
            pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=keep_alpha)
        except RuntimeError as e:
            raise EncodeUnavailable(f"Cannot render {src}: {e}") from e
    finally:
        doc.close()

    if pix.width <= 0 or pix.height <= 0:
        raise InvalidDimensions(f"Rendered {src} to an empty {pix.width}x{pix.height} image")

    mode = "RGBA" if pix.alpha else "RGB"
    img = Image.frombytes(mode, (pix.width, pix.height), pix.samples)

    out = Path(output_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    img.save(out, format="PNG")

    logger.info("Rasterized %s at %.1fx -> %s (%dx%d)", src.name, scale, out, pix.width, pix.height)
    return RasterInfo(path=str(out), width=pix.width, height=pix.height, format="PNG")
