from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse


from honeypot_intel.api.v1.routes_health import router as health_router
from honeypot_intel.api.v1.routes_dashboard import router as dashboard_router

from honeypot_intel.core.config import settings
from honeypot_intel.services.adapters.base import AdapterError


app = FastAPI(
    title="Honeypot Threat-Intel Dashboard API",
    version="0.1.0",
    description="Normalized honeypot events and dashboard aggregates (KPIs, trends, maps, threat intel).",
)


@app.exception_handler(AdapterError)
async def adapter_error_handler(request: Request, exc: AdapterError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": str(exc)},
    )


@app.get("/", tags=["root"])
async def root() -> dict:
    return {
        "status": "ok",
        "service": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
    }


# API v1
app.include_router(health_router, prefix="/api/v1")
app.include_router(dashboard_router, prefix="/api/v1")
