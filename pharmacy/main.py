import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pharmacy.api import auth, medicines, sales, settings as settings_api, transfers
from pharmacy.config import settings
from pharmacy.database import SessionLocal, init_db
from pharmacy.exceptions import PharmacyError
from pharmacy.services.auth_service import ensure_default_admin

logger = logging.getLogger(__name__)
logging.getLogger("pharmacy").setLevel(settings.LOG_LEVEL.upper())


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    # Create default admin if no users
    db = SessionLocal()
    try:
        ensure_default_admin(db)
    finally:
        db.close()
    yield


app = FastAPI(
    title="Clinic Pharmacy API",
    description="Multi-clinic medicine stock, sales, transfers and profit analytics",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PharmacyError)
async def pharmacy_error_handler(request: Request, exc: PharmacyError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return JSON for unhandled exceptions so frontend can parse error."""
    logger.error("Unhandled error: %s\n%s", exc, traceback.format_exc())
    return JSONResponse(status_code=500, content={"detail": str(exc)})


app.include_router(auth.router, prefix="/api/v1")
app.include_router(medicines.router, prefix="/api/v1")
app.include_router(sales.router, prefix="/api/v1")
app.include_router(transfers.router, prefix="/api/v1")
app.include_router(settings_api.router, prefix="/api/v1")


@app.get("/health")
def health():
    return {"status": "ok"}


def run():
    import uvicorn

    uvicorn.run(
        "pharmacy.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
