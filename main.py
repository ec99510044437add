# EduFam Access - HTTP service around the authorization decision engine
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from access import AccessDenied, GrantPermissionError, GrantValidationError, LookupFailure
from access.audit import configure_audit, shutdown_audit
from config import get_settings
from database.database import dispose_db, init_db
from server.endpoints import router as access_router
from server.records import router as records_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    await init_db(settings.database_url)
    configure_audit(settings.audit_log_file, settings.audit_sample_size)
    logger.info("EduFam Access ready")
    yield
    shutdown_audit()
    await dispose_db()


app = FastAPI(
    title="EduFam Access",
    description="Tenant-aware authorization decisions for the EduFam school platform",
    lifespan=lifespan,
)


@app.exception_handler(AccessDenied)
async def access_denied_handler(request: Request, exc: AccessDenied):
    return JSONResponse(status_code=403, content={"detail": "Access denied"})


@app.exception_handler(LookupFailure)
async def lookup_failure_handler(request: Request, exc: LookupFailure):
    # Never an implicit allow: the caller gets a retryable failure
    logger.error("access lookup failed: %s", exc, exc_info=exc)
    return JSONResponse(status_code=503, content={"detail": "Access data unavailable"})


@app.exception_handler(GrantPermissionError)
async def grant_permission_handler(request: Request, exc: GrantPermissionError):
    return JSONResponse(status_code=403, content={"detail": str(exc)})


@app.exception_handler(GrantValidationError)
async def grant_validation_handler(request: Request, exc: GrantValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


app.include_router(access_router)
app.include_router(records_router)


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import os
    import uvicorn
    host = os.environ.get("UVICORN_HOST", "127.0.0.1")
    port = int(os.environ.get("PORT", "8000"))
    uvicorn.run("main:app", host=host, port=port, reload=False)
