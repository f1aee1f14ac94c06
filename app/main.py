from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import pvengine
from pvengine.errors import PVSizerError
from app.config import settings
from app.api.v1 import catalog, electrical, geometry, simulations
from app.core.logging import RequestLoggingMiddleware, setup_logging
from app.services.catalog_service import load_catalog


def create_app() -> FastAPI:
    setup_logging(json_format=settings.log_json, debug=settings.debug)

    application = FastAPI(
        title=settings.app_name,
        version=pvengine.__version__,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(RequestLoggingMiddleware)

    application.include_router(catalog.router, prefix="/api/v1", tags=["catalog"])
    application.include_router(simulations.router, prefix="/api/v1", tags=["simulations"])
    application.include_router(electrical.router, prefix="/api/v1/electrical", tags=["electrical"])
    application.include_router(geometry.router, prefix="/api/v1/geometry", tags=["geometry"])

    @application.get("/health")
    async def health_check() -> dict:
        result: dict = {"status": "ok", "version": pvengine.__version__, "services": {}}

        try:
            cat = load_catalog()
            result["services"]["catalog"] = {
                "panels": len(cat.panels),
                "inverters": len(cat.inverters),
                "batteries": len(cat.batteries),
            }
        except (OSError, ValueError, PVSizerError) as e:
            result["services"]["catalog"] = f"error: {e}"
            result["status"] = "degraded"

        return result

    return application


app = create_app()
