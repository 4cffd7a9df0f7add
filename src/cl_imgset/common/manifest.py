"""Manifest aggregation and persistence.

The manifest is the only thing the html phase reads: build writes it to
``{outputDir}/resized-manifest.json`` and html loads it back, so the page
can be regenerated without resizing anything.
"""

from __future__ import annotations

from datetime import datetime, timezone
from os import PathLike
from pathlib import Path

from pydantic import ValidationError

from .errors import ConfigValidationError, ManifestNotFoundError
from .file_io import read_json, write_json
from .schemas import Manifest, ManifestEntry, OriginalImage, OutputRecord, ResizerConfig


def build_manifest_entry(original: OriginalImage, outputs: list[OutputRecord]) -> ManifestEntry:
    return ManifestEntry(original=original, outputs=list(outputs))


def build_manifest(
    config: ResizerConfig,
    entries: list[ManifestEntry],
    generated_at: datetime | None = None,
) -> Manifest:
    return Manifest(
        generated_at=generated_at or datetime.now(timezone.utc),
        config=config,
        items=entries,
    )


async def save_manifest(manifest: Manifest, path: str | PathLike[str]) -> Path:
    return await write_json(path, manifest.model_dump(mode="json", by_alias=True))


def load_manifest(path: str | PathLike[str]) -> Manifest:
    """
    Read a manifest written by ``save_manifest``.

    Raises:
        ManifestNotFoundError: No manifest at ``path``
        ConfigParseError: The file is not valid JSON
        ConfigValidationError: The JSON is not a manifest
    """
    manifest_path = Path(path)
    if not manifest_path.exists():
        raise ManifestNotFoundError(manifest_path)

    data = read_json(manifest_path)
    try:
        return Manifest.model_validate(data)
    except ValidationError as exc:
        raise ConfigValidationError(manifest_path, str(exc)) from exc
