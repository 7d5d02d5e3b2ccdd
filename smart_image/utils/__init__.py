"""Utility modules (rasterization, output files, manifest)."""

from .io import (
    build_manifest,
    ensure_dir,
    format_bytes,
    generate_output_dir,
    get_display_path,
    sanitize_name,
    write_manifest,
)

_RASTERIZE_NAMES = {"RasterInfo", "is_vector_source", "get_image_info", "rasterize_vector"}


def __getattr__(name):
    """Lazy import for rasterize to avoid pulling in fitz eagerly."""
    if name in _RASTERIZE_NAMES:
        from . import rasterize
        return getattr(rasterize, name)
    raise AttributeError(f"module 'smart_image.utils' has no attribute {name!r}")


__all__ = [
    # Output files
    "build_manifest",
    "ensure_dir",
    "format_bytes",
    "generate_output_dir",
    "get_display_path",
    "sanitize_name",
    "write_manifest",
    # Rasterization (lazy)
    "RasterInfo",
    "is_vector_source",
    "get_image_info",
    "rasterize_vector",
]
