import logging
from contextlib import asynccontextmanager
from datetime import datetime
from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pos_pricing.core.config import settings
from pos_pricing.core.exceptions import PricingError
from pos_pricing.db.session import init_db
from pos_pricing.api.deps import get_now

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title="POS Pricing API",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PricingError)
async def pricing_error_handler(request: Request, exc: PricingError):
    logger.info("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})


# Import routers after app creation to avoid circular imports
from pos_pricing.api import promotions, orders  # noqa: E402

app.include_router(promotions.router)
app.include_router(orders.router)


@app.get("/api/health")
def health_check(now: datetime = Depends(get_now)):
    """Состояние сервиса и часы, по которым считаются акции"""
    return {
        "status": "healthy",
        "env": settings.ENV,
        "timezone": settings.TIMEZONE,
        "local_time": now.isoformat(),
    }
