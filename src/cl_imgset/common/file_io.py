"""Async text/JSON writes that never leave a half-written file behind."""

from __future__ import annotations

import json
from os import PathLike
from pathlib import Path

import aiofiles
import aiofiles.os

from .errors import ConfigParseError

_SNIPPET_RADIUS = 60


async def write_text_atomic(target: str | PathLike[str], text: str) -> Path:
    """Write ``text`` to a sibling temp file, then rename it over ``target``.

    Parent directories are created as needed.
    """
    dst = Path(target)
    dst.parent.mkdir(parents=True, exist_ok=True)
    tmp = dst.with_name(f".{dst.name}.tmp")

    async with aiofiles.open(tmp, "w", encoding="utf-8", newline="") as f:
        _ = await f.write(text)
    await aiofiles.os.replace(tmp, dst)
    return dst


async def write_json(target: str | PathLike[str], data: object) -> Path:
    """Pretty-print ``data`` (2-space indent, trailing newline)."""
    return await write_text_atomic(target, json.dumps(data, indent=2, ensure_ascii=False) + "\n")


def parse_json_text(raw: str, path: str | PathLike[str]) -> object:
    """Decode ``raw``; on failure raise ConfigParseError with a caret snippet."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigParseError(path, exc.pos, error_snippet(raw, exc.pos), exc.msg) from exc


def read_json(path: str | PathLike[str]) -> object:
    raw = Path(path).read_text(encoding="utf-8")
    return parse_json_text(raw, path)


def error_snippet(raw: str, position: int) -> str:
    """Return up to 60 characters either side of ``position`` with a caret line
    inserted under the offending column."""
    start = max(0, position - _SNIPPET_RADIUS)
    end = min(len(raw), position + _SNIPPET_RADIUS)

    before = raw[start:position]
    column = len(before) - (before.rfind("\n") + 1)

    line_end = raw.find("\n", position, end)
    if line_end == -1:
        line_end = end

    return raw[start:line_end] + "\n" + " " * column + "^" + raw[line_end:end]
