"""Shared fixtures: synthetic design images written to tmp_path."""

import random

import pytest
from PIL import Image, ImageDraw


def make_design(width: int, height: int) -> Image.Image:
    """Flat UI-like image: gradient background with a few solid blocks."""
    image = Image.new("RGB", (width, height))
    draw = ImageDraw.Draw(image)
    for y in range(height):
        shade = int(255 * y / max(1, height - 1))
        draw.line([(0, y), (width, y)], fill=(shade, 128, 255 - shade))
    draw.rectangle([width // 10, height // 10, width // 3, height // 4], fill=(250, 250, 250))
    draw.rectangle([width // 2, height // 2, width - 5, height - 5], fill=(20, 30, 40))
    return image


def make_noise(width: int, height: int, seed: int = 0) -> Image.Image:
    """Incompressible RGB noise."""
    rng = random.Random(seed)
    data = bytes(rng.getrandbits(8) for _ in range(width * height * 3))
    return Image.frombytes("RGB", (width, height), data)


@pytest.fixture
def design_png(tmp_path):
    """Factory writing a design image of the requested size to a PNG file."""
    def _factory(width: int = 300, height: int = 200, name: str = "design.png"):
        path = tmp_path / name
        make_design(width, height).save(path)
        return path
    return _factory


@pytest.fixture
def noise_png(tmp_path):
    def _factory(width: int = 64, height: int = 64, name: str = "noise.png"):
        path = tmp_path / name
        make_noise(width, height).save(path)
        return path
    return _factory
