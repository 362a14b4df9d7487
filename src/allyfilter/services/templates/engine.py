"""Renders the wrapper markup around decorated images and anchors."""

from pathlib import Path

from jinja2 import Environment
from markupsafe import Markup

from allyfilter.models.access import AnchorDecision, ImageDecision
from allyfilter.services.templates.filters import register_filters
from allyfilter.services.templates.loader import WrapperTemplateLoader


class WrapperRenderer:
    """Renders wrapper templates with Jinja2."""

    IMAGE_TEMPLATE = "image_wrapper.html"
    ANCHOR_TEMPLATE = "anchor_wrapper.html"
    FOOTER_TEMPLATE = "footer.html"

    def __init__(self, templates_path: Path | None = None) -> None:
        if templates_path is None:
            from allyfilter.config import get_settings

            templates_path = Path(get_settings().resolved_templates_path)
        self.templates_path = templates_path

        self.loader = WrapperTemplateLoader(templates_path)
        self.env = Environment(
            loader=self.loader,
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
            auto_reload=True,
        )
        register_filters(self.env)

    @staticmethod
    def _attribute_url(url: str) -> str:
        """Keep already-encoded attribute text as is, escape anything unsafe."""
        if '"' in url or "<" in url:
            return url
        return Markup(url)

    def render_image(self, element: str, storage_key: str, url: str, decision: ImageDecision) -> str:
        """
        Wrap an img tag with the seizure guard cover and feedback placeholder.

        Args:
            element: The original img tag, emitted unchanged
            storage_key: Canonical key of the referenced file
            url: The src value of the tag
            decision: COVER_ONLY or COVER_AND_FEEDBACK
        """
        template = self.env.get_template(self.IMAGE_TEMPLATE)
        return template.render(
            element=Markup(element),
            file_id=storage_key,
            url=self._attribute_url(url),
            show_feedback=decision == ImageDecision.COVER_AND_FEEDBACK,
        )

    def render_anchor(self, element: str, storage_key: str, url: str, decision: AnchorDecision) -> str:
        """Wrap an anchor element with the download and feedback placeholders."""
        template = self.env.get_template(self.ANCHOR_TEMPLATE)
        return template.render(
            element=Markup(element),
            file_id=storage_key,
            url=self._attribute_url(url),
            show_feedback=decision == AnchorDecision.DOWNLOAD_AND_FEEDBACK,
        )

    def render_footer(self, files: dict[str, str], config: dict[str, object]) -> str:
        """Render the client configuration for the decorated files of a page."""
        if not files:
            return ""
        template = self.env.get_template(self.FOOTER_TEMPLATE)
        return template.render(files=files, config=config)


# Global renderer instance
_wrapper_renderer: WrapperRenderer | None = None


def get_wrapper_renderer() -> WrapperRenderer:
    """Get the global wrapper renderer instance."""
    global _wrapper_renderer
    if _wrapper_renderer is None:
        _wrapper_renderer = WrapperRenderer()
    return _wrapper_renderer


def reset_wrapper_renderer() -> None:
    """Reset the global wrapper renderer. Useful for testing or template changes."""
    global _wrapper_renderer
    _wrapper_renderer = None
