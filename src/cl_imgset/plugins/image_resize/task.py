"""Resize task: every format x width variant of one source image."""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from ...common.errors import ImageProcessingError
from ...common.paths import output_path_for, rel_from_input, to_html_path
from ...common.schemas import ORIGINAL_WIDTH, OriginalImage, OutputRecord, ResizerConfig
from .algo.image_resize import encode_variant, probe_image


@dataclass(frozen=True)
class ResizeTarget:
    """One effective width; ``passthrough`` outputs keep the source's stem."""

    width: int
    passthrough: bool = False


def plan_targets(sizes: Sequence[int | str], natural_width: int) -> list[ResizeTarget]:
    """
    Turn the configured ``sizes`` into effective widths for one source.

    - Positive integers no larger than ``natural_width`` are kept, deduplicated
      and sorted; these outputs carry a ``-{width}`` suffix
    - An empty-string entry adds an unsuffixed output at ``natural_width``,
      alongside a suffixed one if that width was also listed explicitly
    - When nothing qualifies the source is exported once at its natural width,
      unsuffixed
    """
    widths = sorted(
        {
            w
            for w in sizes
            if isinstance(w, int) and not isinstance(w, bool) and 0 < w <= natural_width
        }
    )
    targets = [ResizeTarget(width=w) for w in widths]

    if ORIGINAL_WIDTH in sizes or not targets:
        targets.append(ResizeTarget(width=natural_width, passthrough=True))
    return targets


def describe_source(input_dir: Path, source: Path) -> OriginalImage:
    """Probe ``source`` once and capture what the manifest needs about it."""
    width, height = probe_image(source)
    return OriginalImage(
        abs_path=str(source),
        rel_from_input=to_html_path(rel_from_input(input_dir, source)),
        base=source.name,
        width=width,
        height=height,
    )


async def resize_image(
    config: ResizerConfig,
    original: OriginalImage,
    input_dir: Path,
    output_dir: Path,
) -> list[OutputRecord]:
    """
    Produce (or find) every variant of one source image.

    Formats form the outer loop, widths the inner one. Encodes run one at a
    time in a worker thread. Existing outputs are never overwritten.

    Raises:
        ImageProcessingError: A variant could not be decoded, encoded or placed
            in the output tree
    """
    source = Path(original.abs_path)
    natural_width = original.width or 0
    targets = plan_targets(config.sizes, natural_width)
    records: list[OutputRecord] = []

    for spec in config.formats:
        fmt = spec.format
        for target in targets:
            destination = output_path_for(
                input_dir=input_dir,
                output_dir=output_dir,
                source=source,
                width=target.width,
                fmt=fmt,
                preserve_folders=config.preserve_folders,
                passthrough=target.passthrough,
            )
            label = (
                f"{fmt} {target.width}w | {original.rel_from_input} -> "
                + to_html_path(destination.relative_to(output_dir))
            )

            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
                exists = destination.exists()
                if not exists:
                    _ = await asyncio.to_thread(
                        encode_variant,
                        input_path=source,
                        output_path=destination,
                        width=target.width,
                        spec=spec,
                    )
            except Exception as exc:
                raise ImageProcessingError(source, fmt, target.width, str(exc)) from exc

            logger.info(f"{'skip ' if exists else 'write'} {label}")
            records.append(
                OutputRecord(
                    format=fmt,
                    width=target.width,
                    file_full=str(destination),
                    status="skipped" if exists else "written",
                    passthrough=target.passthrough,
                )
            )
    return records
