"""Pure image resize/encode logic (single variant) on top of Pillow."""

import os
import tempfile
from pathlib import Path

from PIL import Image, ImageFile, ImageOps
from pillow_heif import register_heif_opener

from ....common.schemas import FormatSpec

register_heif_opener()

# Decode what we can from damaged files instead of failing the whole image
ImageFile.LOAD_TRUNCATED_IMAGES = True

EXIF_ORIENTATION_TAG = 0x0112
# Orientations 5-8 rotate by 90/270 degrees, swapping width and height
_TRANSPOSED_ORIENTATIONS = {5, 6, 7, 8}


def get_pil_format(format_str: str) -> str:
    """Convert format string to PIL format name."""
    format_map = {
        "jpg": "JPEG",
        "jpeg": "JPEG",
        "png": "PNG",
        "webp": "WEBP",
        "avif": "AVIF",
        "gif": "GIF",
        "tif": "TIFF",
        "tiff": "TIFF",
        "heic": "HEIF",
        "heif": "HEIF",
    }
    return format_map.get(format_str.lower(), format_str.upper())


def probe_image(input_path: str | Path) -> tuple[int, int]:
    """
    Read the natural size of an image without decoding its pixels.

    The size is reported as displayed, i.e. after EXIF auto-orientation.

    Raises:
        FileNotFoundError: If input image does not exist
        OSError: If Pillow cannot identify the image
    """
    with Image.open(input_path) as img:
        width, height = img.size
        orientation = img.getexif().get(EXIF_ORIENTATION_TAG)
    if orientation in _TRANSPOSED_ORIENTATIONS:
        return height, width
    return width, height


def save_options(spec: FormatSpec) -> dict[str, object]:
    """Pillow ``save()`` keyword arguments for one output format."""
    fmt = spec.format
    if fmt == "avif":
        effort = spec.effort if spec.effort is not None else 4
        # Pillow's AVIF speed runs the other way round: 0 slowest, 10 fastest
        return {
            "quality": spec.quality if spec.quality is not None else 32,
            "speed": max(0, min(10, 9 - effort)),
        }
    if fmt == "webp":
        options: dict[str, object] = {
            "quality": spec.quality if spec.quality is not None else 80,
        }
        if spec.effort is not None:
            options["method"] = min(spec.effort, 6)
        return options
    if fmt in ("jpeg", "jpg"):
        return {
            "quality": spec.quality if spec.quality is not None else 75,
            "progressive": bool(spec.progressive),
            "optimize": spec.mozjpeg is not False,
        }
    if fmt == "png":
        return {
            "compress_level": spec.compression_level if spec.compression_level is not None else 9,
        }
    return {}


def encode_variant(
    *,
    input_path: str | Path,
    output_path: str | Path,
    width: int,
    spec: FormatSpec,
) -> str:
    """
    Resize a single image to ``width`` and write it in ``spec.format``.

    The image is auto-oriented first. Aspect ratio is preserved and the image
    is never enlarged. The file appears at ``output_path`` only once fully
    written.

    Args:
        input_path: Path to input image
        output_path: Path to output image (parent directory must exist)
        width: Target width in pixels
        spec: Output format and encoder tuning

    Returns:
        Output file path as string

    Raises:
        FileNotFoundError: If input image or output directory does not exist
        OSError: If Pillow fails to read/write the image
    """
    output_path = Path(output_path)
    if not output_path.parent.exists():
        raise FileNotFoundError(f"Output directory does not exist: {output_path.parent}")

    fmt = spec.format

    with Image.open(input_path) as img:
        oriented = ImageOps.exif_transpose(img)
        resized = _resize_to_width(oriented, width)

        # JPEG does not support alpha channel
        if fmt in ("jpg", "jpeg") and resized.mode not in ("RGB", "L", "CMYK"):
            resized = resized.convert("RGB")

        # One temp file per call; several sources can target the same destination
        fd, tmp_name = tempfile.mkstemp(
            dir=output_path.parent, prefix=f".{output_path.name}.", suffix=".part"
        )
        os.close(fd)
        tmp_path = Path(tmp_name)
        try:
            resized.save(tmp_path, format=get_pil_format(fmt), **save_options(spec))
            os.replace(tmp_path, output_path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()

    return str(output_path)


def _resize_to_width(img: Image.Image, width: int) -> Image.Image:
    original_width, original_height = img.size
    if width >= original_width:
        return img
    height = max(1, round(original_height * width / original_width))
    return img.resize((width, height), Image.Resampling.LANCZOS)
