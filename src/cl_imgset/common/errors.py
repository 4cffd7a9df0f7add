"""Exception hierarchy for cl_imgset."""

from __future__ import annotations

from pathlib import Path


class ImgsetError(Exception):
    """Base class for cl_imgset errors; the CLI exits nonzero on any it receives."""


class ConfigParseError(ImgsetError):
    """A JSON document (config or manifest) could not be decoded."""

    def __init__(self, path: str | Path, position: int, snippet: str, reason: str):
        self.path: Path = Path(path)
        self.position: int = position
        self.snippet: str = snippet
        self.reason: str = reason
        super().__init__(
            f"JSON parse error in {self.path} near position {position}: {reason}\n"
            + f"---\n{snippet}\n---"
        )


class ConfigValidationError(ImgsetError):
    """Config JSON decoded fine but does not match the expected schema."""

    def __init__(self, path: str | Path, details: str):
        self.path: Path = Path(path)
        self.details: str = details
        super().__init__(f"Invalid config in {self.path}:\n{details}")


class ConfigExistsError(ImgsetError):
    def __init__(self, path: str | Path):
        self.path: Path = Path(path)
        super().__init__(f"Config already exists at {self.path}. Aborting.")


class ManifestNotFoundError(ImgsetError):
    def __init__(self, path: str | Path):
        self.path: Path = Path(path)
        super().__init__(f"Manifest not found at {self.path}. Run the build command first.")


class ImageProcessingError(ImgsetError):
    """Decode/resize/encode failed for one source image.

    Never fatal for a batch: the builder records it and moves on.
    """

    def __init__(
        self,
        source: str | Path,
        fmt: str | None = None,
        width: int | None = None,
        reason: str = "",
    ):
        self.source: Path = Path(source)
        self.fmt: str | None = fmt
        self.width: int | None = width
        self.reason: str = reason
        where = str(self.source)
        if fmt is not None:
            where += f" ({fmt} {width}w)"
        super().__init__(f"Failed to process {where}: {reason}")
