"""Export rendering for completed artifacts."""

import re
from dataclasses import dataclass

from coinforge.errors.exceptions import ValidationError
from coinforge.models.enums import ExportFormat

_FORMAT_ALIASES = {
    "raw": ExportFormat.RAW,
    "full": ExportFormat.RAW,
    "html": ExportFormat.RAW,
    "templated": ExportFormat.TEMPLATED,
    "wordpress": ExportFormat.TEMPLATED,
}

_UNSAFE_CHARS = re.compile(r"[^a-z0-9]")


@dataclass(frozen=True)
class ExportFile:
    content: str
    media_type: str
    filename: str


def parse_export_format(value: str | None) -> ExportFormat:
    if not value:
        return ExportFormat.RAW
    fmt = _FORMAT_ALIASES.get(value.strip().lower())
    if fmt is None:
        raise ValidationError(
            f"Unsupported export type '{value}'",
            {"supported": sorted(_FORMAT_ALIASES)},
        )
    return fmt


def sanitize_filename(name: str) -> str:
    return _UNSAFE_CHARS.sub("_", name.lower())


def render_export(job_id: str, artifact: str, fmt: ExportFormat) -> ExportFile:
    stem = sanitize_filename(job_id)
    if fmt == ExportFormat.TEMPLATED:
        content = (
            "<?php\n"
            "/**\n"
            f" * Template Name: {stem}_Generated_Website\n"
            " */\n"
            "get_header();\n"
            "?>\n"
            '<div id="generated-website">\n'
            f"{artifact}\n"
            "</div>\n"
            "<?php get_footer(); ?>\n"
        )
        return ExportFile(content, "application/php", f"{stem}_generated_website.php")
    return ExportFile(artifact, "text/html", f"{stem}_website.html")
