"""Command-line entry point: ``cl-imgset [init|build|html|all] -c CONFIG``."""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence

from loguru import logger

from .builder import build
from .common.config_loader import (
    DEFAULT_CONFIG_NAME,
    Workspace,
    load_config,
    resolve_workspace,
    write_default_config,
)
from .common.errors import ImgsetError
from .common.manifest import build_manifest, load_manifest
from .common.schemas import Manifest, ResizerConfig
from .plugins.html_preview.task import write_html
from .utils.profiling import timed

COMMANDS = ("init", "build", "html", "all")


def configure_logging(verbose: bool = False) -> None:
    logger.remove()
    _ = logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "INFO",
        format="[imgset] {message}",
        colorize=False,
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="cl-imgset",
        description=(
            "Resize images into multiple widths and formats, then write a "
            "preview page with responsive <picture> markup."
        ),
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="all",
        choices=COMMANDS,
        help="init: write a default config; build: resize; html: write the preview page; "
        + "all: build then html (default)",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=DEFAULT_CONFIG_NAME,
        help=f"Path to the config file (default: {DEFAULT_CONFIG_NAME})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


@timed
async def run_html(config: ResizerConfig, workspace: Workspace, manifest: Manifest | None = None) -> None:
    if manifest is None:
        manifest = load_manifest(workspace.manifest_path)
    _ = await write_html(manifest, config.html, workspace.html_path)


async def run_command(command: str, config_path: str) -> None:
    if command == "init":
        _ = await write_default_config(config_path)
        return

    config = load_config(config_path)
    workspace = resolve_workspace(config, config_path)

    if command == "build":
        _ = await build(config, workspace)
    elif command == "html":
        await run_html(config, workspace)
    else:
        result = await build(config, workspace)
        # Nothing scanned: still emit an (empty) page from an in-memory manifest
        manifest = result.manifest
        if manifest is None:
            manifest = build_manifest(config, [])
        await run_html(config, workspace, manifest)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)
    try:
        asyncio.run(run_command(args.command, args.config))
    except ImgsetError as exc:
        logger.error(str(exc))
        return 1
    except Exception:
        logger.exception("Unexpected error")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
