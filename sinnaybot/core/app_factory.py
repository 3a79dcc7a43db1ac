"""Application factory for creating and configuring the FastAPI app."""

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from sinnaybot import __version__
from sinnaybot.core.lifespan import lifespan
from sinnaybot.middleware.error_handlers import register_error_handlers
from sinnaybot.middleware.logging_middleware import register_request_logging
from sinnaybot.routers import health_router, spotify_router, twitch_router


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="SinnayBot",
        description="""
        Twitch chat bot that answers `!sinnaybot song` with the track playing on Spotify.

        ## Setup
        1. Visit /spotify/login and approve access to your Spotify account
        2. Visit /twitch/login and approve chat access for the bot account
        3. Type `!sinnaybot song` in the broadcast channel
        """,
        version=__version__,
        lifespan=lifespan,
    )

    register_request_logging(app)
    register_error_handlers(app)

    app.include_router(health_router.router, tags=["health"])
    app.include_router(twitch_router.router, prefix="/twitch", tags=["twitch"])
    app.include_router(spotify_router.router, prefix="/spotify", tags=["spotify"])

    # Default SPOTIFY_REDIRECT_URI points at /callback
    app.add_api_route(
        "/callback",
        spotify_router.spotify_callback,
        methods=["GET"],
        response_class=PlainTextResponse,
        include_in_schema=False,
    )

    return app
