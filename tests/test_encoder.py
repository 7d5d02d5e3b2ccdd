"""Tests for the size-constrained encoder."""

from pathlib import Path

import pytest
from PIL import Image

from smart_image.contracts import EncodeBudget, Region
from smart_image.errors import EncodeUnavailable, InvalidDimensions
from smart_image.imaging import encoder
from smart_image.imaging.encoder import QUALITY_LADDER, SCALE_LADDER, encode_to_fit


def _area_sized_encoder(calls):
    """Fake _encode_once: size proportional to pixel count and quality."""
    def fake(frame, fmt, quality, webp_method=4, jpeg_optimize=True):
        calls.append((frame.size, quality))
        n = frame.width * frame.height * quality // 100
        return b"x" * n, frame.width, frame.height
    return fake


def test_ladders_are_descending():
    assert QUALITY_LADDER[0] == 95 and QUALITY_LADDER[-1] == 20
    assert all(a - b == 5 for a, b in zip(QUALITY_LADDER, QUALITY_LADDER[1:]))
    assert SCALE_LADDER == sorted(SCALE_LADDER, reverse=True)
    assert SCALE_LADDER[-1] == 0.2


def test_fits_at_first_quality(design_png, tmp_path):
    src = design_png(200, 100)
    budget = EncodeBudget(max_bytes=1_000_000, max_long_edge=4096, prefer_format="webp")

    artifact = encode_to_fit(src, tmp_path / "out" / "overview.webp", budget)

    assert artifact.quality == 95
    assert artifact.scale_factor == 1.0
    assert (artifact.width, artifact.height) == (200, 100)
    assert artifact.format == "webp"
    assert artifact.bytes == Path(artifact.path).stat().st_size
    assert artifact.within_budget(budget.max_bytes)


def test_extension_appended_for_jpeg(design_png, tmp_path):
    src = design_png(120, 80)
    budget = EncodeBudget(max_bytes=1_000_000, max_long_edge=4096, prefer_format="jpeg")

    artifact = encode_to_fit(src, tmp_path / "nested" / "overview", budget)

    assert artifact.path.endswith("overview.jpg")
    assert Path(artifact.path).is_file()
    with Image.open(artifact.path) as written:
        assert written.format == "JPEG"


def test_initial_scale_clamps_long_edge(design_png, tmp_path):
    src = design_png(400, 200)
    budget = EncodeBudget(max_bytes=1_000_000, max_long_edge=100)

    artifact = encode_to_fit(src, tmp_path / "small", budget)

    assert artifact.scale_factor == pytest.approx(0.25)
    assert (artifact.width, artifact.height) == (100, 50)


def test_region_is_encoded_alone(design_png, tmp_path):
    src = design_png(300, 200)
    budget = EncodeBudget(max_bytes=1_000_000, max_long_edge=4096)

    artifact = encode_to_fit(src, tmp_path / "crop", budget, region=Region(50, 20, 100, 80))

    assert (artifact.width, artifact.height) == (100, 80)


def test_region_long_edge_uses_region_size(design_png, tmp_path):
    src = design_png(1000, 200)
    budget = EncodeBudget(max_bytes=1_000_000, max_long_edge=200)

    artifact = encode_to_fit(src, tmp_path / "crop", budget, region=Region(0, 0, 200, 100))

    # the region already fits the long edge even though the source does not
    assert artifact.scale_factor == 1.0
    assert (artifact.width, artifact.height) == (200, 100)


@pytest.mark.parametrize("region", [
    Region(250, 0, 100, 100),   # past the right edge
    Region(0, 0, 0, 10),        # zero width
    Region(-1, 0, 10, 10),      # negative origin
])
def test_invalid_region_raises(design_png, tmp_path, region):
    src = design_png(300, 200)
    budget = EncodeBudget(max_bytes=1_000_000, max_long_edge=4096)

    with pytest.raises(InvalidDimensions):
        encode_to_fit(src, tmp_path / "bad", budget, region=region)


def test_budget_unmet_still_returns_artifact(noise_png, tmp_path):
    src = noise_png(64, 64)
    budget = EncodeBudget(max_bytes=1, max_long_edge=4096)

    artifact = encode_to_fit(src, tmp_path / "tiny", budget)

    assert artifact is not None
    assert artifact.bytes > budget.max_bytes
    assert not artifact.within_budget(budget.max_bytes)
    assert artifact.bytes == Path(artifact.path).stat().st_size
    assert artifact.scale_factor < 1.0


def test_idempotent_for_identical_inputs(design_png, tmp_path):
    src = design_png(256, 256)
    budget = EncodeBudget(max_bytes=2_000, max_long_edge=4096)

    first = encode_to_fit(src, tmp_path / "a", budget)
    second = encode_to_fit(src, tmp_path / "b", budget)

    assert (first.bytes, first.quality, first.scale_factor) == (
        second.bytes, second.quality, second.scale_factor
    )


def test_accepts_in_memory_rgba_image_for_jpeg(tmp_path):
    image = Image.new("RGBA", (64, 48), (255, 0, 0, 0))
    budget = EncodeBudget(max_bytes=1_000_000, max_long_edge=4096, prefer_format="jpeg")

    artifact = encode_to_fit(image, tmp_path / "rgba", budget)

    assert (artifact.width, artifact.height) == (64, 48)
    with Image.open(artifact.path) as written:
        assert written.mode == "RGB"
        # transparent pixels are flattened onto white
        assert written.getpixel((10, 10))[0] > 240


def test_scale_phase_after_quality_phase(monkeypatch, tmp_path):
    calls = []
    monkeypatch.setattr(encoder, "_encode_once", _area_sized_encoder(calls))
    image = Image.new("RGB", (100, 100), "white")
    budget = EncodeBudget(max_bytes=1500, max_long_edge=4096)

    artifact = encode_to_fit(image, tmp_path / "scaled", budget)

    # 100x100 never fits, 90x90 never fits, 80x80 fits at quality 20
    assert artifact.scale_factor == pytest.approx(0.8)
    assert artifact.quality == 20
    assert artifact.bytes == 80 * 80 * 20 // 100
    assert (artifact.width, artifact.height) == (80, 80)
    assert len(calls) == 3 * len(QUALITY_LADDER)


def test_scale_is_monotonic_non_increasing(monkeypatch, tmp_path):
    calls = []
    monkeypatch.setattr(encoder, "_encode_once", _area_sized_encoder(calls))
    image = Image.new("RGB", (50, 50), "white")
    # long edge already below the first ladder steps: 0.9 etc. still only shrink
    budget = EncodeBudget(max_bytes=1, max_long_edge=40)

    artifact = encode_to_fit(image, tmp_path / "mono", budget)

    widths = [size[0] for size, _ in calls]
    assert widths == sorted(widths, reverse=True)
    assert artifact.scale_factor == pytest.approx(0.2)
    assert max(widths) == 40


def test_smallest_result_kept_in_search_order(monkeypatch, tmp_path):
    sizes = {95: 500, 90: 300}

    def fake(frame, fmt, quality, webp_method=4, jpeg_optimize=True):
        return b"x" * sizes.get(quality, 400), frame.width, frame.height

    monkeypatch.setattr(encoder, "_encode_once", fake)
    image = Image.new("RGB", (20, 20), "white")
    budget = EncodeBudget(max_bytes=100, max_long_edge=4096)

    artifact = encode_to_fit(image, tmp_path / "best", budget)

    # later 300-byte attempts at smaller scales do not replace the first one
    assert artifact.bytes == 300
    assert artifact.quality == 90
    assert artifact.scale_factor == 1.0


def test_error_in_quality_phase_moves_to_scale_phase(monkeypatch, tmp_path):
    calls = []
    fallback = _area_sized_encoder(calls)

    def fake(frame, fmt, quality, webp_method=4, jpeg_optimize=True):
        if frame.width == 100:
            calls.append((frame.size, quality))
            raise OSError("broken frame")
        return fallback(frame, fmt, quality)

    monkeypatch.setattr(encoder, "_encode_once", fake)
    image = Image.new("RGB", (100, 100), "white")
    budget = EncodeBudget(max_bytes=10**9, max_long_edge=4096)

    artifact = encode_to_fit(image, tmp_path / "recovered", budget)

    assert [c for c in calls if c[0][0] == 100] == [((100, 100), 95)]
    assert artifact.scale_factor == pytest.approx(0.9)
    assert artifact.quality == 95


def test_error_in_scale_phase_skips_to_next_scale(monkeypatch, tmp_path):
    calls = []
    fallback = _area_sized_encoder(calls)

    def fake(frame, fmt, quality, webp_method=4, jpeg_optimize=True):
        if frame.width == 90:
            raise ValueError("unsupported")
        return fallback(frame, fmt, quality)

    monkeypatch.setattr(encoder, "_encode_once", fake)
    image = Image.new("RGB", (100, 100), "white")
    budget = EncodeBudget(max_bytes=1500, max_long_edge=4096)

    artifact = encode_to_fit(image, tmp_path / "skipped", budget)

    assert artifact.scale_factor == pytest.approx(0.8)
    assert artifact.quality == 20


def test_all_attempts_failing_raises(monkeypatch, tmp_path):
    def fake(frame, fmt, quality, webp_method=4, jpeg_optimize=True):
        raise OSError("encoder missing")

    monkeypatch.setattr(encoder, "_encode_once", fake)
    image = Image.new("RGB", (32, 32), "white")
    budget = EncodeBudget(max_bytes=1000, max_long_edge=4096)

    with pytest.raises(EncodeUnavailable):
        encode_to_fit(image, tmp_path / "never", budget)
    assert not (tmp_path / "never.webp").exists()


def test_undecodable_source_raises(tmp_path):
    src = tmp_path / "garbage.png"
    src.write_bytes(b"not an image at all")
    budget = EncodeBudget(max_bytes=1000, max_long_edge=4096)

    with pytest.raises(EncodeUnavailable):
        encode_to_fit(src, tmp_path / "out", budget)


def test_missing_source_raises(tmp_path):
    budget = EncodeBudget(max_bytes=1000, max_long_edge=4096)

    with pytest.raises(FileNotFoundError):
        encode_to_fit(tmp_path / "missing.png", tmp_path / "out", budget)


@pytest.mark.parametrize("kwargs", [
    {"max_bytes": 0, "max_long_edge": 100},
    {"max_bytes": 100, "max_long_edge": -1},
    {"max_bytes": 100, "max_long_edge": 100, "prefer_format": "png"},
])
def test_budget_validation(kwargs):
    with pytest.raises(ValueError):
        EncodeBudget(**kwargs)
