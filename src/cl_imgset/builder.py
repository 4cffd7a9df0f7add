"""Build runtime - fans source images out to the resize task.

Responsibilities:
- Discovers source images under the input directory
- Runs one task per image, gated by a ConcurrencyLimiter
- Collects each task's typed result (entry or failure) once all settle
- Writes the manifest and reports stats
"""

import asyncio
import time
from pathlib import Path

from loguru import logger

from .common.config_loader import Workspace
from .common.errors import ImageProcessingError
from .common.limiter import ConcurrencyLimiter
from .common.manifest import build_manifest, build_manifest_entry, save_manifest
from .common.schemas import (
    BuildResult,
    BuildStats,
    ImageFailure,
    ManifestEntry,
    ResizerConfig,
)
from .plugins.image_resize.task import describe_source, resize_image
from .utils.profiling import timed


def discover_sources(input_dir: Path, extensions: list[str], exclude: Path | None = None) -> list[Path]:
    """
    Recursively list files whose extension is in ``extensions``, sorted.

    Anything under ``exclude`` (the output directory, when it sits inside
    the input directory) is ignored so outputs are never re-ingested.
    """
    wanted = {ext.lower() for ext in extensions}
    found: list[Path] = []
    for path in input_dir.rglob("*"):
        if not path.is_file() or path.suffix[1:].lower() not in wanted:
            continue
        if exclude is not None and exclude != input_dir and exclude in path.parents:
            continue
        found.append(path)
    return sorted(found)


async def process_source(
    config: ResizerConfig,
    source: Path,
    workspace: Workspace,
    limiter: ConcurrencyLimiter,
) -> ManifestEntry | ImageFailure:
    """Run the full per-image pipeline once a limiter slot is free.

    Failures are returned, not raised, so one bad image never aborts the batch.
    """
    async with limiter:
        try:
            original = await asyncio.to_thread(describe_source, workspace.input_dir, source)
        except Exception as exc:
            error = ImageProcessingError(source, reason=str(exc))
            logger.error(str(error))
            return ImageFailure(source=str(source), error=str(error))

        try:
            outputs = await resize_image(config, original, workspace.input_dir, workspace.output_dir)
        except ImageProcessingError as exc:
            logger.error(str(exc))
            return ImageFailure(source=str(source), error=str(exc))

    return build_manifest_entry(original, outputs)


def find_collisions(entries: list[ManifestEntry]) -> dict[str, list[str]]:
    """Output paths claimed by more than one source (flattened folders with repeated names)."""
    claims: dict[str, list[str]] = {}
    for entry in entries:
        for path in dict.fromkeys(o.file_full for o in entry.outputs):
            claims.setdefault(path, []).append(entry.original.rel_from_input)
    return {path: owners for path, owners in claims.items() if len(owners) > 1}


@timed
async def build(config: ResizerConfig, workspace: Workspace) -> BuildResult:
    """
    Resize every source image and persist the manifest.

    A missing input directory or an empty match set is logged and yields an
    empty result (no manifest is written); it is not an error.

    Returns:
        BuildResult with the manifest, counters and per-image failures
    """
    started = time.perf_counter()
    input_dir = workspace.input_dir
    output_dir = workspace.output_dir

    if not input_dir.is_dir():
        logger.error(
            f"Input directory not found:\n  {input_dir}\n(Check your config: {workspace.config_path})"
        )
        return BuildResult()

    output_dir.mkdir(parents=True, exist_ok=True)

    sources = discover_sources(input_dir, config.extensions, exclude=output_dir)
    if not sources:
        logger.error(
            f"No input images found in {input_dir} (extensions: {', '.join(config.extensions)})"
        )
        return BuildResult()

    logger.info(f"Resolved input:  {input_dir}")
    logger.info(f"Resolved output: {output_dir}")
    logger.info(f"Found {len(sources)} images. Processing with concurrency={config.concurrency}...")

    limiter = ConcurrencyLimiter(config.concurrency)
    results = await asyncio.gather(
        *(process_source(config, source, workspace, limiter) for source in sources)
    )

    entries = [r for r in results if isinstance(r, ManifestEntry)]
    failures = [r for r in results if isinstance(r, ImageFailure)]
    statuses = [o.status for entry in entries for o in entry.outputs]
    for path, owners in find_collisions(entries).items():
        logger.warning(f"Output collision: {', '.join(owners)} all map to {path}; only one is kept")

    manifest = build_manifest(config, entries)
    _ = await save_manifest(manifest, workspace.manifest_path)

    stats = BuildStats(
        files=len(sources),
        written=statuses.count("written"),
        skipped=statuses.count("skipped"),
        failed=len(failures),
        time_ms=int((time.perf_counter() - started) * 1000),
    )
    logger.info(
        f"Done. {stats.written} written, {stats.skipped} skipped across "
        + f"{stats.files} originals in {stats.time_ms}ms."
    )
    if failures:
        logger.warning(f"{len(failures)} image(s) failed and were left out of the manifest")
    logger.info(f"Manifest: {workspace.manifest_path}")
    return BuildResult(manifest=manifest, stats=stats, failures=failures)
