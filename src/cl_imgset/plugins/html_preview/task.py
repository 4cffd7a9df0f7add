"""HTML preview task: render a manifest to a standalone page."""

from pathlib import Path

from loguru import logger

from ...common.file_io import write_text_atomic
from ...common.schemas import HtmlSettings, Manifest
from .algo.picture_markup import render_page


async def write_html(manifest: Manifest, settings: HtmlSettings, html_path: Path) -> Path:
    """Write the preview page; image paths are relative to ``html_path``'s directory."""
    html_abs = html_path.resolve()
    document = render_page(manifest, settings, html_abs.parent)
    _ = await write_text_atomic(html_abs, document)
    logger.info(f"HTML written to {html_abs} ({len(manifest.items)} images)")
    return html_abs
