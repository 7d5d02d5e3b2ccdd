"""File I/O utilities: output directories, manifest writing, display helpers."""

import hashlib
import json
import os
import re
import time
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..config import default_config
from ..contracts import ResultSet

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_BYTE_UNITS = ["B", "KB", "MB", "GB"]


def sanitize_name(name: str) -> str:
    """Lowercase a name and collapse each run of non-alphanumerics into '_'."""
    return _NON_ALNUM.sub("_", name.lower())


def ensure_dir(dir_path: Union[str, Path]) -> Path:
    """Create a directory (and parents) if absent. Safe against concurrent creation."""
    path = Path(dir_path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def generate_output_dir(
    base_dir: Union[str, Path] = default_config.output_dir,
    use_timestamp: bool = True,
) -> Path:
    """
    Unique output directory under base_dir.

    Named after the current epoch milliseconds, or an 8-char md5 of it
    when use_timestamp is False. The directory is not created.
    """
    timestamp = str(int(time.time() * 1000))
    if use_timestamp:
        dir_name = timestamp
    else:
        dir_name = hashlib.md5(timestamp.encode("utf-8")).hexdigest()[:8]
    return Path(base_dir).resolve() / dir_name


def format_bytes(num_bytes: int) -> str:
    """Human-readable byte count, e.g. 1536 -> '1.5 KB'."""
    if num_bytes <= 0:
        return "0 B"
    value = float(num_bytes)
    unit = 0
    while value >= 1024 and unit < len(_BYTE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {_BYTE_UNITS[unit]}"


def get_display_path(path: Union[str, Path], cwd: Optional[Union[str, Path]] = None) -> str:
    """Path relative to cwd when it lives underneath it, else absolute."""
    resolved = Path(path).resolve()
    base = Path(cwd).resolve() if cwd is not None else Path.cwd().resolve()
    try:
        return str(resolved.relative_to(base))
    except ValueError:
        return str(resolved)


def build_manifest(result: ResultSet, version: str = default_config.manifest_version) -> Dict[str, Any]:
    """
    Serialize a ResultSet into the manifest layout.

    Keys: version, timestamp (epoch ms), selected, overview, tiles, crops.
    crops is omitted when no crop was produced.
    """
    manifest: Dict[str, Any] = {
        "version": version,
        "timestamp": int(time.time() * 1000),
        "selected": dict(result.selected),
        "overview": result.overview.to_dict(),
        "tiles": [t.to_dict() for t in result.tiles],
    }
    if result.crops:
        manifest["crops"] = [c.to_dict() for c in result.crops]
    return manifest


def write_manifest(
    manifest_path: Union[str, Path],
    result: ResultSet,
    version: str = default_config.manifest_version,
) -> Path:
    """Write manifest.json for a ResultSet and return its path."""
    path = Path(manifest_path)
    ensure_dir(path.parent)
    data = build_manifest(result, version=version)
    tmp_path = path.with_name(path.name + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    os.replace(tmp_path, path)
    return path
