"""cl_imgset - responsive image sets and <picture> previews from a manifest."""

from .builder import build, discover_sources
from .common.config_loader import Workspace, load_config, resolve_workspace, write_default_config
from .common.errors import (
    ConfigExistsError,
    ConfigParseError,
    ConfigValidationError,
    ImageProcessingError,
    ImgsetError,
    ManifestNotFoundError,
)
from .common.limiter import ConcurrencyLimiter
from .common.manifest import build_manifest, load_manifest, save_manifest
from .common.schemas import (
    BuildResult,
    BuildStats,
    FormatSpec,
    HtmlSettings,
    ImageFailure,
    Manifest,
    ManifestEntry,
    OriginalImage,
    OutputRecord,
    ResizerConfig,
)
from .plugins.html_preview.task import write_html

__version__ = "0.1.0"

__all__ = [
    "BuildResult",
    "BuildStats",
    "ConcurrencyLimiter",
    "ConfigExistsError",
    "ConfigParseError",
    "ConfigValidationError",
    "FormatSpec",
    "HtmlSettings",
    "ImageFailure",
    "ImageProcessingError",
    "ImgsetError",
    "Manifest",
    "ManifestEntry",
    "ManifestNotFoundError",
    "OriginalImage",
    "OutputRecord",
    "ResizerConfig",
    "Workspace",
    "__version__",
    "build",
    "build_manifest",
    "discover_sources",
    "load_config",
    "load_manifest",
    "resolve_workspace",
    "save_manifest",
    "write_default_config",
    "write_html",
]
