"""Template rendering utilities for HTML views."""

from pathlib import Path

from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"
templates = Jinja2Templates(directory=TEMPLATES_DIR)


class TemplateRenderer:
    """Handles rendering of Jinja2 templates for the bot's HTML pages."""

    @staticmethod
    def render_spotify_needs_auth(request: Request, status_code: int = 401) -> HTMLResponse:
        """Render the page pointing the user at the Spotify login."""
        return templates.TemplateResponse(
            request,
            "spotify_needs_auth.html",
            {"login_url": request.url_for("spotify_login")},
            status_code=status_code,
        )
