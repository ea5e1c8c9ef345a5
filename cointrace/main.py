from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cointrace.config import settings
from cointrace.core.database import Base, engine
from cointrace.core.errors import CoinTraceError
from cointrace.core.logging_config import get_logger, setup_logging
from cointrace import models  # noqa: F401  (registers tables on Base.metadata)
from cointrace.api.analytics import router as analytics_router
from cointrace.api.auth import router as auth_router
from cointrace.api.bills import router as bills_router
from cointrace.api.shops import router as shops_router
from cointrace.api.users import router as users_router

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables checked/created")
    yield
    await engine.dispose()


app = FastAPI(title="CoinTrace", version="1.0.0", lifespan=lifespan)


@app.exception_handler(CoinTraceError)
async def domain_error_handler(request: Request, exc: CoinTraceError):
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error: %s", exc)
    detail = "Internal server error"
    err_str = str(exc).lower()
    if "duplicate key" in err_str or "unique constraint" in err_str:
        detail = "Conflicting data (duplicate). Refresh the page and try again."
    elif "foreign key" in err_str:
        detail = "Referenced record not found. Sign out and sign in again."
    return JSONResponse(
        status_code=500,
        content={"error": "internal_error", "detail": detail},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(shops_router)
app.include_router(bills_router)
app.include_router(analytics_router)


@app.get("/health")
def health():
    return {"status": "ok"}
