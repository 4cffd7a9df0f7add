"""Deterministic output naming and HTML-relative paths."""

import os
from pathlib import Path, PurePath


def to_html_path(path: str | PurePath) -> str:
    """Forward slashes regardless of the host OS."""
    return str(path).replace(os.sep, "/")


def rel_from_input(input_dir: Path, source: Path) -> Path:
    return Path(os.path.relpath(source, input_dir))


def output_name(source: Path, width: int, fmt: str, passthrough: bool = False) -> str:
    """``kitty-640.webp``, or ``kitty.webp`` for the original-width passthrough."""
    if passthrough:
        return f"{source.stem}.{fmt}"
    return f"{source.stem}-{width}.{fmt}"


def output_path_for(
    *,
    input_dir: Path,
    output_dir: Path,
    source: Path,
    width: int,
    fmt: str,
    preserve_folders: bool,
    passthrough: bool = False,
) -> Path:
    """
    Resolve where one variant of ``source`` is written.

    With ``preserve_folders`` the source's subdirectory below ``input_dir`` is
    mirrored under ``output_dir``; otherwise every output lands directly in
    ``output_dir``.
    """
    relative = rel_from_input(input_dir, source)
    out_dir = output_dir / relative.parent if preserve_folders else output_dir
    return out_dir / output_name(relative, width, fmt, passthrough)


def html_relative(target: str | Path, html_dir: Path) -> str:
    """Path from the HTML file's directory to ``target``, '/' separated."""
    return to_html_path(os.path.relpath(Path(target).resolve(), Path(html_dir).resolve()))
