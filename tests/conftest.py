"""Test configuration and fixtures for cl_imgset.

This module provides:
- Function-scoped fixtures that synthesize source images with Pillow
- A small project layout (config file + input directory) in tmp_path
"""

import json
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image

from cl_imgset.plugins.image_resize.algo.image_resize import (
    EXIF_ORIENTATION_TAG,
    get_pil_format,
)

ImageFactory = Callable[..., Path]
ConfigWriter = Callable[..., Path]


# ============================================================================
# Image Fixtures
# ============================================================================


@pytest.fixture
def make_image(tmp_path: Path) -> ImageFactory:
    """Factory writing a solid-color image under tmp_path.

    Usage:
        path = make_image("input/photos/kitty.jpg", width=800, height=600)
    """

    def _make(
        relative_path: str,
        width: int = 800,
        height: int = 600,
        color: tuple[int, ...] = (200, 120, 40),
        mode: str = "RGB",
        orientation: int | None = None,
    ) -> Path:
        path = tmp_path / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)

        img = Image.new(mode, (width, height), color=color)
        save_kwargs: dict[str, object] = {}
        if orientation is not None:
            exif = Image.Exif()
            exif[EXIF_ORIENTATION_TAG] = orientation
            save_kwargs["exif"] = exif

        img.save(path, format=get_pil_format(path.suffix[1:]), **save_kwargs)
        return path

    return _make


@pytest.fixture
def sample_image(make_image: ImageFactory) -> Path:
    """An 800x600 JPEG at input/photos/cats/kitty.jpg."""
    return make_image("input/photos/cats/kitty.jpg")


# ============================================================================
# Project Fixtures
# ============================================================================


def base_config() -> dict[str, object]:
    """Small, fast config: two portable formats, two widths."""
    return {
        "inputDir": "./input",
        "outputDir": "./output",
        "extensions": ["jpg", "jpeg", "png"],
        "formats": [
            {"format": "webp", "quality": 70},
            {"format": "jpeg", "quality": 70, "progressive": True, "mozjpeg": True},
        ],
        "sizes": [320, 640],
        "preserveFolders": True,
        "concurrency": 2,
    }


@pytest.fixture
def write_config(tmp_path: Path) -> ConfigWriter:
    """Factory writing a config JSON under tmp_path; overrides are merged on top of base_config()."""

    def _write(relative_path: str = "resizer.config.json", **overrides: object) -> Path:
        data = base_config()
        data.update(overrides)
        path = tmp_path / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        _ = path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return path

    return _write
