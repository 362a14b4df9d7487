"""Custom Jinja2 filters for wrapper templates."""

import json
from typing import Any
from urllib.parse import unquote

from jinja2 import Environment
from markupsafe import Markup


def file_label(url: str) -> str:
    """Return a human readable file name from a file URL."""
    if not url:
        return ""
    if "?file=" in url:
        url = url.split("?file=", 1)[1].split("&", 1)[0]
    else:
        url = url.split("?", 1)[0]
    name = url.rstrip("/").rsplit("/", 1)[-1]
    return unquote(name)


def script_json(value: Any) -> Markup:
    """Serialize a value as JSON that is safe inside a script element."""
    text = json.dumps(value, sort_keys=True)
    text = text.replace("<", "\\u003c").replace(">", "\\u003e").replace("&", "\\u0026")
    return Markup(text)


def register_filters(env: Environment) -> None:
    """Register all custom filters on a Jinja2 environment."""
    env.filters["file_label"] = file_label
    env.filters["script_json"] = script_json
