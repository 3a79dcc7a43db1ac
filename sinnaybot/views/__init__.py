"""Views module for template rendering."""

from sinnaybot.views.template_renderer import TemplateRenderer

__all__ = ["TemplateRenderer"]
