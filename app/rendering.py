"""
HTML rendering

Jinja2 templates for the upload form and the decoded guide summary.
"""
from pathlib import Path

import humanize
from fastapi.templating import Jinja2Templates

from app.utils.timestamps import format_timestamp


TEMPLATES_DIR = Path(__file__).parent / "templates"


def humanize_bytes(size: int | None) -> str:
    """Human readable byte size using SI units (e.g. '82.9 MB')"""
    if size is None:
        return "unknown"
    return humanize.naturalsize(size)


templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["humanize_bytes"] = humanize_bytes
templates.env.filters["timestamp"] = format_timestamp
