"""Unit tests for config loading, path resolution and init."""

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from cl_imgset.common.config_loader import (
    MANIFEST_NAME,
    load_config,
    resolve_workspace,
    write_default_config,
)
from cl_imgset.common.errors import ConfigExistsError, ConfigParseError, ConfigValidationError
from cl_imgset.common.file_io import error_snippet
from cl_imgset.common.schemas import ResizerConfig

# ============================================================================
# LOADING
# ============================================================================


def test_missing_config_uses_defaults(tmp_path: Path):
    """Test a missing file yields the documented defaults."""
    config = load_config(tmp_path / "nope.json")

    assert config.input_dir == "./input"
    assert config.output_dir == "./output"
    assert config.sizes == [320, 640, 960, 1280, 1920, 2560, 3840]
    assert [f.format for f in config.formats] == ["avif", "webp", "jpeg"]
    assert 2 <= config.concurrency <= 8
    assert config.html.file == "index.html"


def test_partial_html_section_keeps_other_defaults(write_config: Callable[..., Path]):
    """Test html keys are merged with defaults rather than replacing the section."""
    path = write_config(html={"pageTitle": "Holiday"})

    config = load_config(path)

    assert config.html.page_title == "Holiday"
    assert config.html.file == "index.html"
    assert config.html.sizes_attribute == "100vw"
    assert config.html.wrap_figure is True


def test_extensions_are_normalized(write_config: Callable[..., Path]):
    path = write_config(extensions=[".JPG", "Png", " webp "])

    assert load_config(path).extensions == ["jpg", "png", "webp"]


def test_sizes_accept_original_width_marker(write_config: Callable[..., Path]):
    """Test an empty-string entry survives validation untouched."""
    path = write_config(sizes=[320, "", 0])

    assert load_config(path).sizes == [320, "", 0]


def test_sizes_drop_unusable_entries(write_config: Callable[..., Path]):
    """Test null, fractional, textual and boolean widths are dropped instead of failing."""
    path = write_config(sizes=[320, None, 640.5, 960.0, "big", True, ""])

    assert load_config(path).sizes == [320, 960, ""]


def test_format_names_are_lowercased(write_config: Callable[..., Path]):
    path = write_config(formats=[{"format": "WebP", "quality": 60, "effort": 5}])

    spec = load_config(path).formats[0]
    assert spec.format == "webp"
    assert spec.effort == 5


def test_malformed_json_reports_position_and_snippet(tmp_path: Path):
    """Test a syntax error names the file, offset and shows a caret snippet."""
    path = tmp_path / "resizer.config.json"
    _ = path.write_text('{\n  "inputDir": "./in",\n  "sizes": [320, 640,]\n}\n', encoding="utf-8")

    with pytest.raises(ConfigParseError) as exc_info:
        _ = load_config(path)

    error = exc_info.value
    assert error.path == path.resolve()
    assert error.position > 0
    assert "^" in error.snippet
    assert str(path.resolve()) in str(error)


def test_schema_mismatch_raises_validation_error(write_config: Callable[..., Path]):
    path = write_config(concurrency=0)

    with pytest.raises(ConfigValidationError):
        _ = load_config(path)


def test_non_object_json_raises_validation_error(tmp_path: Path):
    path = tmp_path / "resizer.config.json"
    _ = path.write_text("[1, 2, 3]", encoding="utf-8")

    with pytest.raises(ConfigValidationError):
        _ = load_config(path)


def test_error_snippet_caret_points_at_column():
    raw = 'line one\n{"a": oops}\nline three'
    position = raw.index("oops")

    snippet = error_snippet(raw, position)

    lines = snippet.split("\n")
    caret_line = lines[lines.index('{"a": oops}') + 1]
    assert caret_line == " " * 6 + "^"


# ============================================================================
# WORKSPACE RESOLUTION
# ============================================================================


def test_dirs_resolve_against_config_directory(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
):
    """Test inputDir is anchored at the config file, not the working directory."""
    config_path = tmp_path / "project" / "tools" / "config.json"
    config_path.parent.mkdir(parents=True)
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    monkeypatch.chdir(elsewhere)

    workspace = resolve_workspace(ResizerConfig(input_dir="./input"), config_path)

    assert workspace.input_dir == (tmp_path / "project" / "tools" / "input").resolve()
    assert workspace.output_dir == (tmp_path / "project" / "tools" / "output").resolve()
    assert workspace.manifest_path == workspace.output_dir / MANIFEST_NAME
    assert workspace.html_path == workspace.output_dir / "index.html"


def test_relative_config_path_is_made_absolute(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)

    workspace = resolve_workspace(ResizerConfig(), "sub/resizer.config.json")

    assert workspace.config_dir == (tmp_path / "sub").resolve()
    assert workspace.input_dir == (tmp_path / "sub" / "input").resolve()


def test_html_file_may_live_outside_output(tmp_path: Path):
    config = ResizerConfig.model_validate({"html": {"file": "../site/preview.html"}})

    workspace = resolve_workspace(config, tmp_path / "resizer.config.json")

    assert workspace.html_path == (tmp_path / "site" / "preview.html").resolve()


# ============================================================================
# INIT
# ============================================================================


@pytest.mark.asyncio
async def test_write_default_config_round_trips(tmp_path: Path):
    """Test init writes camelCase JSON that loads back to the defaults."""
    path = tmp_path / "resizer.config.json"

    written = await write_default_config(path)

    data = json.loads(written.read_text(encoding="utf-8"))
    assert data["inputDir"] == "./input"
    assert data["html"]["sizesAttribute"] == "100vw"
    assert data["formats"][2] == {
        "format": "jpeg",
        "quality": 75,
        "progressive": True,
        "mozjpeg": True,
    }
    assert load_config(path).sizes == ResizerConfig().sizes


@pytest.mark.asyncio
async def test_write_default_config_refuses_to_overwrite(tmp_path: Path):
    path = tmp_path / "resizer.config.json"
    _ = path.write_text("{}", encoding="utf-8")

    with pytest.raises(ConfigExistsError):
        _ = await write_default_config(path)

    assert path.read_text(encoding="utf-8") == "{}"
