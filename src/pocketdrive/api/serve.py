"""API server for ``pocketdrive serve``.

Mounts the versioned ``/api/v1/`` routers with CORS for the host admin UI.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def create_api_app():
    """Build the FastAPI application with the v1 API routers."""
    from fastapi import FastAPI
    from fastapi.middleware.cors import CORSMiddleware

    from pocketdrive import __version__
    from pocketdrive.api.v1 import mount_v1_routers
    from pocketdrive.config import get_settings

    app = FastAPI(
        title="pocketdrive API",
        description="Browse and manage files on local and OneDrive disks.",
        version=__version__,
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
        openapi_url="/api/v1/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_settings().api_cors_allowed_origins,
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
        expose_headers=["X-Error-Code"],
    )

    mount_v1_routers(app)

    return app


def run_api_server(
    host: str = "127.0.0.1",
    port: int = 8890,
    dev: bool = False,
) -> None:
    """Start the API server."""
    import uvicorn

    logger.info("API docs: http://%s:%d/api/v1/docs", host, port)

    if dev:
        import pathlib

        src_dir = str(pathlib.Path(__file__).resolve().parent.parent)
        uvicorn.run(
            "pocketdrive.api.serve:create_api_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            reload_dirs=[src_dir],
            reload_includes=["*.py"],
            log_level="debug",
        )
    else:
        app = create_api_app()
        uvicorn.run(app, host=host, port=port)
