"""Wrapper markup rendering with Jinja2."""

from allyfilter.services.templates.engine import (
    WrapperRenderer,
    get_wrapper_renderer,
    reset_wrapper_renderer,
)

__all__ = ["WrapperRenderer", "get_wrapper_renderer", "reset_wrapper_renderer"]
