"""``depositgate serve`` — run the HTTP API under uvicorn."""

from __future__ import annotations

import typer
import uvicorn

from depositgate.api.app import create_app
from depositgate.config import settings


def serve_cmd(
    host: str = typer.Option(
        None, "--host", help="Bind address. Defaults to DEPOSITGATE_HOST."
    ),
    port: int = typer.Option(
        None, "--port", "-p", help="Bind port. Defaults to DEPOSITGATE_PORT."
    ),
) -> None:
    """Serve ``POST /deposit`` and ``GET /health``."""
    app = create_app(settings)
    # log_config=None keeps the handler installed by the CLI callback.
    uvicorn.run(
        app,
        host=host or settings.host,
        port=port or settings.port,
        log_config=None,
    )
