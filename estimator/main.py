from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from .config import settings
from .database import engine, Base, SessionLocal
from .persistence import EstimateRepository
from .pricing_engine import PricingEngine
from .pricing_rates import DEFAULT_RATES, load_rate_table
from .routers import estimate
from .store import ConfigurationStore

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("estimator")

# Create tables (single snapshot table, no migrations)
Base.metadata.create_all(bind=engine)


def build_store() -> ConfigurationStore:
    """
    Wire the store from settings: rate table, SQL persistence, delivery miles.
    The saved snapshot, if any, is restored before the first request.
    """
    rates = load_rate_table(settings.RATES_FILE) if settings.RATES_FILE else DEFAULT_RATES
    store = ConfigurationStore(
        engine=PricingEngine(rates),
        persistence=EstimateRepository(SessionLocal, settings.ESTIMATE_STORAGE_KEY),
        delivery_distance_miles=settings.DELIVERY_DISTANCE_MILES,
    )
    if store.load_estimate():
        logger.info(f"Restored saved estimate {settings.ESTIMATE_STORAGE_KEY!r}")
    return store


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.store = build_store()
    yield
    # Nothing is saved implicitly; callers save through POST /api/estimate/save
    app.state.store = None


app = FastAPI(
    title="Metal Building Estimator",
    description=f"Building configuration and price estimates for {settings.COMPANY_NAME}",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(estimate.router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok", "app": "metal-building-estimator"}
