from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from .config import settings
from .database import engine, Base
from .routers import measurements, records, quotations

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("gypquote")

# Key/value storage table
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Gypsum Works Estimator",
    description=f"Site measurements and quotations for {settings.COMPANY_NAME}",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(measurements.router, prefix="/api")
app.include_router(records.router, prefix="/api")
app.include_router(quotations.router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok", "app": "gypquote"}


@app.on_event("startup")
def log_catalog():
    """Load the pricing catalogue once at startup so a bad CATALOG_PATH fails early."""
    from .catalog import get_catalog
    catalog = get_catalog()
    logger.info(
        "Pricing catalogue ready: %d materials, %d thickness tiers, %d additionals",
        len(catalog.materials), len(catalog.thicknesses), len(catalog.additionals),
    )
