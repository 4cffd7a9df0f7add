"""Loading, resolving and initializing ``resizer.config.json``."""

from __future__ import annotations

from dataclasses import dataclass
from os import PathLike
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from .errors import ConfigExistsError, ConfigValidationError
from .file_io import read_json, write_json
from .schemas import ResizerConfig

DEFAULT_CONFIG_NAME = "resizer.config.json"
MANIFEST_NAME = "resized-manifest.json"


@dataclass(frozen=True)
class Workspace:
    """Absolute locations derived from a config and the file it came from.

    Every relative directory in the config is anchored at ``config_dir``,
    never at the process working directory.
    """

    config_path: Path
    config_dir: Path
    input_dir: Path
    output_dir: Path
    manifest_path: Path
    html_path: Path


def load_config(path: str | PathLike[str]) -> ResizerConfig:
    """Read and validate the config at ``path``.

    A missing file yields the defaults. Keys absent from the file (including
    keys of the ``html`` section) keep their default values.

    Raises:
        ConfigParseError: The file is not valid JSON
        ConfigValidationError: The JSON does not match the config schema
    """
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        logger.info(
            f"No config at {config_path}, using defaults. "
            + f'Run "cl-imgset init -c {path}" to create one.'
        )
        return ResizerConfig()

    data = read_json(config_path)
    if not isinstance(data, dict):
        raise ConfigValidationError(config_path, "top-level JSON value must be an object")
    try:
        return ResizerConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigValidationError(config_path, str(exc)) from exc


def resolve_workspace(config: ResizerConfig, config_path: str | PathLike[str]) -> Workspace:
    config_abs = Path(config_path).expanduser().resolve()
    config_dir = config_abs.parent
    output_dir = (config_dir / config.output_dir).resolve()
    return Workspace(
        config_path=config_abs,
        config_dir=config_dir,
        input_dir=(config_dir / config.input_dir).resolve(),
        output_dir=output_dir,
        manifest_path=output_dir / MANIFEST_NAME,
        html_path=(output_dir / config.html.file).resolve(),
    )


async def write_default_config(path: str | PathLike[str]) -> Path:
    """Create a config file holding every default; refuse to overwrite.

    Raises:
        ConfigExistsError: Something already exists at ``path``
    """
    config_path = Path(path).expanduser().resolve()
    if config_path.exists():
        raise ConfigExistsError(config_path)

    defaults = ResizerConfig()
    payload = defaults.model_dump(mode="json", by_alias=True, exclude_none=True)
    _ = await write_json(config_path, payload)
    logger.info(f"Wrote default config to {config_path}")
    logger.info(
        f'Edit it, put your originals in "{defaults.input_dir}", '
        + f"then run: cl-imgset all -c {path}"
    )
    return config_path
