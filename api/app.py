from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from api.routes import sessions as session_routes
from api.services.sessions import SessionRegistry


def create_app(registry: Optional[SessionRegistry] = None) -> FastAPI:
    """Build the API. Each app owns its own session registry unless one is passed in."""
    app = FastAPI(
        title="Push-up Counter API",
        description="REST API feeding pose landmark frames to the push-up rep counter.",
        version="0.1.0",
    )
    app.state.registry = registry if registry is not None else SessionRegistry()
    app.include_router(session_routes.router)

    @app.get("/", include_in_schema=False)
    async def redirect_to_docs() -> RedirectResponse:
        return RedirectResponse(url="/docs")

    return app


app = create_app()
