"""Responsive ``<picture>`` markup for manifest entries (pure, no I/O)."""

import math
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from jinja2 import Environment
from markupsafe import Markup

from ....common.paths import html_relative
from ....common.schemas import HtmlSettings, Manifest, ManifestEntry

_jinja_env = Environment(autoescape=True, keep_trailing_newline=False)
Template = _jinja_env.from_string

FALLBACK_FORMAT_PRIORITY = ("jpeg", "jpg", "webp", "avif")
DEFAULT_INTRINSIC_WIDTH = 800
DEFAULT_HEIGHT_RATIO = 0.66

_SEPARATOR_RUNS = re.compile(r"[-_]+")
_EXTENSION = re.compile(r"\.[^.]+$")

PICTURE_TEMPLATE = Template(
    """\
{%- if wrap_figure %}<figure>
{% endif -%}
{%- for source in sources %}  <source type="{{ source.mime }}" srcset="{{ source.srcset }}" sizes="{{ sizes }}">
{% endfor -%}
{% if wrap_figure %}  {% endif %}<img src="{{ img.src }}" srcset="{{ img.srcset }}" sizes="{{ sizes }}" \
alt="{{ img.alt }}" width="{{ img.width }}" height="{{ img.height }}" loading="lazy" decoding="async"\
{% if class_name %} class="{{ class_name }}"{% endif %}>
{%- if wrap_figure %}
</figure>{% endif %}"""
)

PAGE_TEMPLATE = Template(
    """\
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{{ title }}</title>
  <style>
    body { font-family: system-ui, sans-serif; margin: 2rem; line-height: 1.4; }
    figure { margin: 0 0 2rem 0; }
    img { max-width: 100%; height: auto; display: block; }
  </style>
</head>
<body>
  <h1>{{ title }}</h1>

{{ body }}

</body>
</html>
"""
)


@dataclass(frozen=True)
class Variant:
    """An output record as seen from the HTML file's directory."""

    format: str
    width: int
    html_rel: str


def nice_alt_from_filename(filename: str) -> str:
    """``my_cat--photo.jpg`` -> ``My cat photo``."""
    name = _EXTENSION.sub("", filename)
    spaced = _SEPARATOR_RUNS.sub(" ", name).strip()
    return spaced[:1].upper() + spaced[1:]


def mime_type(fmt: str) -> str:
    return "image/jpeg" if fmt == "jpg" else f"image/{fmt}"


def group_by_format(variants: list[Variant]) -> dict[str, list[Variant]]:
    """Group in first-seen format order; each group sorted by width."""
    groups: dict[str, list[Variant]] = {}
    for variant in variants:
        groups.setdefault(variant.format, []).append(variant)
    for group in groups.values():
        group.sort(key=lambda v: v.width)
    return groups


def pick_fallback_format(formats: list[str]) -> str | None:
    for candidate in FALLBACK_FORMAT_PRIORITY:
        if candidate in formats:
            return candidate
    return formats[0] if formats else None


def pick_fallback_src(group: list[Variant]) -> str:
    """Second-smallest width when there are two or more, else the only one."""
    if not group:
        return ""
    return group[min(1, len(group) - 1)].html_rel


def build_srcset(group: list[Variant]) -> str:
    """``a-320.webp 320w, a-640.webp 640w``; a width is listed only once."""
    seen: set[int] = set()
    candidates: list[str] = []
    for variant in group:
        if variant.width in seen:
            continue
        seen.add(variant.width)
        candidates.append(f"{variant.html_rel} {variant.width}w")
    return ", ".join(candidates)


def intrinsic_size(
    group: list[Variant],
    original_width: int | None,
    original_height: int | None,
) -> tuple[int, int]:
    """Width/height hints from the largest fallback variant and the source's aspect ratio."""
    width = (group[-1].width if group else 0) or original_width or DEFAULT_INTRINSIC_WIDTH
    if original_width and original_height:
        ratio = original_height / original_width
    else:
        ratio = DEFAULT_HEIGHT_RATIO
    return width, _round_half_up(width * ratio)


def entry_variants(entry: ManifestEntry, html_dir: Path) -> list[Variant]:
    return [
        Variant(
            format=record.format,
            width=record.width,
            html_rel=html_relative(record.file_full, html_dir),
        )
        for record in entry.outputs
    ]


def render_picture(entry: ManifestEntry, settings: HtmlSettings, html_dir: Path) -> str:
    """
    Render the markup block for one manifest entry.

    Every format gets a ``<source>``; the ``<img>`` fallback uses the most
    widely supported format present. All paths are relative to ``html_dir``.
    """
    groups = group_by_format(entry_variants(entry, html_dir))
    fallback_format = pick_fallback_format(list(groups))
    fallback_group = groups.get(fallback_format, []) if fallback_format else []

    original = entry.original
    if settings.alt_from_filename:
        alt = nice_alt_from_filename(original.base)
    else:
        alt = PurePosixPath(original.base).stem
    width, height = intrinsic_size(fallback_group, original.width, original.height)

    sources = [
        {"mime": mime_type(fmt), "srcset": build_srcset(group)}
        for fmt, group in groups.items()
    ]
    img = {
        "src": pick_fallback_src(fallback_group),
        "srcset": build_srcset(fallback_group),
        "alt": alt,
        "width": width,
        "height": height,
    }
    return PICTURE_TEMPLATE.render(
        sources=sources,
        img=img,
        sizes=settings.sizes_attribute,
        class_name=settings.class_name,
        wrap_figure=settings.wrap_figure,
    )


def render_page(manifest: Manifest, settings: HtmlSettings, html_dir: Path) -> str:
    """Full preview document with one block per manifest entry, in manifest order."""
    blocks = [render_picture(entry, settings, html_dir) for entry in manifest.items]
    return PAGE_TEMPLATE.render(
        title=settings.page_title,
        body=Markup("\n\n".join(blocks)),
    )


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
