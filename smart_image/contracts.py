"""Inter-stage data contracts for the encode / tile / crop pipeline."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


SUPPORTED_FORMATS = ("webp", "jpeg")
FORMAT_EXTENSIONS = {"webp": "webp", "jpeg": "jpg"}


@dataclass(frozen=True)
class Region:
    """Integer rectangle in source-pixel space."""
    left: int
    top: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """(left, upper, right, lower) box as PIL's crop() expects."""
        return (self.left, self.top, self.right, self.bottom)

    def fits_within(self, width: int, height: int) -> bool:
        return (
            self.width > 0
            and self.height > 0
            and self.left >= 0
            and self.top >= 0
            and self.right <= width
            and self.bottom <= height
        )


@dataclass(frozen=True)
class EncodeBudget:
    """Byte and resolution ceilings an artifact should try to satisfy."""
    max_bytes: int
    max_long_edge: int
    prefer_format: str = "webp"

    def __post_init__(self):
        if self.max_bytes <= 0:
            raise ValueError(f"max_bytes must be positive, got {self.max_bytes}")
        if self.max_long_edge <= 0:
            raise ValueError(f"max_long_edge must be positive, got {self.max_long_edge}")
        if self.prefer_format not in SUPPORTED_FORMATS:
            raise ValueError(
                f"prefer_format must be one of {SUPPORTED_FORMATS}, got {self.prefer_format!r}"
            )

    @property
    def extension(self) -> str:
        return FORMAT_EXTENSIONS[self.prefer_format]

    def with_max_long_edge(self, max_long_edge: int) -> "EncodeBudget":
        return EncodeBudget(
            max_bytes=self.max_bytes,
            max_long_edge=max_long_edge,
            prefer_format=self.prefer_format,
        )


@dataclass(frozen=True)
class TilingOptions:
    tile_px: int = 1536
    overlap_px: int = 96

    def __post_init__(self):
        if self.tile_px <= 0:
            raise ValueError(f"tile_px must be positive, got {self.tile_px}")
        if self.overlap_px < 0:
            raise ValueError(f"overlap_px must be non-negative, got {self.overlap_px}")
        if self.overlap_px >= self.tile_px:
            raise ValueError(
                f"overlap_px ({self.overlap_px}) must be smaller than tile_px ({self.tile_px})"
            )

    @property
    def stride(self) -> int:
        return self.tile_px - self.overlap_px


@dataclass(frozen=True)
class CropOptions:
    min_crop_size: int = 768

    def __post_init__(self):
        if self.min_crop_size <= 0:
            raise ValueError(f"min_crop_size must be positive, got {self.min_crop_size}")


@dataclass
class EncodedArtifact:
    """Output from the size-constrained encoder."""
    path: str
    bytes: int           # Exact on-disk size
    width: int           # Encoded width after scaling
    height: int          # Encoded height after scaling
    format: str          # "webp" or "jpeg"
    quality: int         # 1-100
    scale_factor: float  # 0 < s <= 1

    def within_budget(self, max_bytes: int) -> bool:
        return self.bytes <= max_bytes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "bytes": self.bytes,
            "width": self.width,
            "height": self.height,
            "format": self.format,
            "quality": self.quality,
            "scaleFactor": self.scale_factor,
        }


@dataclass
class Tile:
    """One cell of the overlapping tile grid."""
    row: int
    col: int
    region: Region
    artifact: EncodedArtifact

    def to_dict(self) -> Dict[str, Any]:
        d = self.artifact.to_dict()
        d.update({
            "row": self.row,
            "col": self.col,
            "x": self.region.left,
            "y": self.region.top,
            "w": self.region.width,
            "h": self.region.height,
        })
        return d


@dataclass
class CropRegion:
    """Named heuristic crop with its encoded artifact."""
    name: str
    region: Region
    artifact: EncodedArtifact

    def to_dict(self) -> Dict[str, Any]:
        d = self.artifact.to_dict()
        d.update({
            "name": self.name,
            "x": self.region.left,
            "y": self.region.top,
            "w": self.region.width,
            "h": self.region.height,
        })
        return d


@dataclass
class ResultSet:
    """All artifacts produced by one pipeline invocation."""
    overview: EncodedArtifact
    tiles: List[Tile] = field(default_factory=list)
    crops: List[CropRegion] = field(default_factory=list)
    selected: Dict[str, Any] = field(default_factory=dict)
    # selected includes: sourcePath, sourceFormatUsed, rasterPath
    output_dir: Optional[str] = None
    manifest_path: Optional[str] = None

    @property
    def artifact_count(self) -> int:
        return 1 + len(self.tiles) + len(self.crops)
