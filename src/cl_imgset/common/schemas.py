"""Pydantic schemas for the resizer config, manifest and build results."""

import os
from datetime import datetime
from typing import ClassVar, Literal

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ORIGINAL_WIDTH = ""
"""Marker in ``sizes`` requesting an extra unsuffixed output at the natural width."""


def default_concurrency() -> int:
    return max(2, min(os.cpu_count() or 1, 8))


class CamelModel(BaseModel):
    """JSON documents use camelCase keys, Python code uses snake_case."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ─────────────────────────────────────────────────────────────
# Config
# ─────────────────────────────────────────────────────────────


class FormatSpec(CamelModel):
    """One output format plus its encoder tuning."""

    format: str = Field(..., min_length=1, description="Output format name, e.g. 'webp'")
    quality: int | None = Field(default=None, ge=1, le=100)
    effort: int | None = Field(default=None, ge=0, le=9, description="CPU effort (avif, webp)")
    progressive: bool | None = None
    mozjpeg: bool | None = None
    compression_level: int | None = Field(default=None, ge=0, le=9)

    @field_validator("format")
    @classmethod
    def normalize_format(cls, v: str) -> str:
        return v.strip().lstrip(".").lower()


class HtmlSettings(CamelModel):
    """Settings for the generated preview page."""

    file: str = "index.html"
    page_title: str = "Resized Images"
    sizes_attribute: str = "100vw"
    wrap_figure: bool = True
    alt_from_filename: bool = True
    class_name: str = ""


def _default_formats() -> list[FormatSpec]:
    return [
        FormatSpec(format="avif", quality=32, effort=4),
        FormatSpec(format="webp", quality=80),
        FormatSpec(format="jpeg", quality=75, progressive=True, mozjpeg=True),
    ]


class ResizerConfig(CamelModel):
    """Top-level settings read from ``resizer.config.json``.

    ``input_dir`` and ``output_dir`` are stored as written; they are resolved
    against the config file's directory by ``config_loader.resolve_workspace``.
    ``sizes`` entries that are not whole numbers (or the '' marker) are
    dropped with a warning; non-positive entries and widths larger than a
    source are dropped per image at resize time.
    """

    input_dir: str = "./input"
    output_dir: str = "./output"
    extensions: list[str] = Field(
        default_factory=lambda: ["jpg", "jpeg", "png", "webp", "avif"],
    )
    formats: list[FormatSpec] = Field(default_factory=_default_formats)
    sizes: list[int | Literal[""]] = Field(
        default_factory=lambda: [320, 640, 960, 1280, 1920, 2560, 3840],
    )
    preserve_folders: bool = True
    concurrency: int = Field(default_factory=default_concurrency, ge=1)
    html: HtmlSettings = Field(default_factory=HtmlSettings)

    @field_validator("sizes", mode="before")
    @classmethod
    def drop_unusable_sizes(cls, v: object) -> object:
        """Keep whole numbers and the '' marker; anything else is dropped with a warning."""
        if not isinstance(v, list):
            return v
        kept: list[int | str] = []
        for entry in v:
            if entry == ORIGINAL_WIDTH or (isinstance(entry, int) and not isinstance(entry, bool)):
                kept.append(entry)
            elif isinstance(entry, float) and entry.is_integer():
                kept.append(int(entry))
            else:
                logger.warning(f"Ignoring unusable entry in sizes: {entry!r}")
        return kept

    @field_validator("extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        return [ext.strip().lstrip(".").lower() for ext in v if ext.strip()]


# ─────────────────────────────────────────────────────────────
# Manifest
# ─────────────────────────────────────────────────────────────

OutputStatus = Literal["written", "skipped"]


class OriginalImage(CamelModel):
    """A discovered source image and its natural (auto-oriented) size."""

    abs_path: str = Field(..., alias="abs", description="Absolute path of the source")
    rel_from_input: str = Field(..., description="Path relative to inputDir, '/' separated")
    base: str = Field(..., description="Source file name")
    width: int | None = None
    height: int | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


class OutputRecord(CamelModel):
    """One resized file produced (or found already present) for a source."""

    format: str
    width: int
    file_full: str = Field(..., description="Absolute path of the output file")
    status: OutputStatus
    passthrough: bool = Field(
        default=False,
        description="Original-width output named without the -{width} suffix",
    )


class ManifestEntry(CamelModel):
    original: OriginalImage
    outputs: list[OutputRecord] = Field(default_factory=list)


class Manifest(CamelModel):
    """Handoff document between the build and html phases."""

    generated_at: datetime
    config: ResizerConfig
    items: list[ManifestEntry] = Field(default_factory=list)

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


# ─────────────────────────────────────────────────────────────
# Build results
# ─────────────────────────────────────────────────────────────


class ImageFailure(BaseModel):
    """A source image that could not be processed."""

    source: str
    error: str


class BuildStats(CamelModel):
    files: int = 0
    written: int = 0
    skipped: int = 0
    failed: int = 0
    time_ms: int = 0


class BuildResult(BaseModel):
    """Returned by ``builder.build``; ``manifest`` is None when nothing was scanned."""

    manifest: Manifest | None = None
    stats: BuildStats = Field(default_factory=BuildStats)
    failures: list[ImageFailure] = Field(default_factory=list)
