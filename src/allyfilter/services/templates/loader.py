"""Jinja2 loader for wrapper templates with in-memory overrides."""

from pathlib import Path
from typing import Any

from jinja2 import BaseLoader, Environment, TemplateNotFound


class WrapperTemplateLoader(BaseLoader):
    """
    Template loader for the markup emitted around decorated elements.

    Supports loading from:
    1. Override templates registered in memory (host theme customizations)
    2. The configured templates directory
    """

    def __init__(self, templates_path: Path) -> None:
        self.templates_path = templates_path
        self._template_cache: dict[str, str] = {}

    def add_template(self, name: str, source: str) -> None:
        """Add an override template to the cache."""
        self._template_cache[name] = source

    def clear_cache(self) -> None:
        """Clear the override templates."""
        self._template_cache.clear()

    def get_source(self, environment: Environment, template: str) -> tuple[str, str | None, Any]:
        """Load a template from the overrides, then from the templates directory."""
        if template in self._template_cache:
            source = self._template_cache[template]
            # Uptodate only while the override is unchanged
            return source, template, lambda: self._template_cache.get(template) == source

        path = self.templates_path / template
        if path.exists():
            mtime = path.stat().st_mtime
            return path.read_text(encoding="utf-8"), str(path), lambda: path.exists() and path.stat().st_mtime == mtime

        raise TemplateNotFound(template)
