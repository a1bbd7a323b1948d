from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hr_backend.core.config import get_settings, setup_logging
from hr_backend.infrastructure import LarkClient, XeroClient, configure_lark_client, configure_xero_client
from hr_backend.routes import pipeline, records, sheets, xero


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="HR Pipeline Dashboard API", version="0.1.0")

    if settings.lark_configured:
        client = LarkClient(
            app_id=settings.lark_app_id,
            app_secret=settings.lark_app_secret,
            app_token=settings.lark_app_token,
            api_base=settings.lark_api_base,
        )
        configure_lark_client(client)

    if settings.xero_configured:
        configure_xero_client(
            XeroClient(
                client_id=settings.xero_client_id,
                client_secret=settings.xero_client_secret,
                redirect_uri=settings.xero_redirect_uri,
            )
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for router in records.routers:
        app.include_router(router, prefix="/api")
    app.include_router(pipeline.router, prefix="/api")
    app.include_router(xero.router, prefix="/api")
    app.include_router(sheets.router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse(
            {
                "message": "HR Pipeline Dashboard API",
                "docs": "/docs",
                "health": "/api/pipeline",
            }
        )

    return app


app = create_app()
