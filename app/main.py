import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.cache import cache
from app.config import settings
from app.log import configure_logging
from app.middleware import TimingMiddleware
from app.responses import bad_request, server_error
from app.routers import articles, categories

VERSION = "1.0.0"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Starting FitQuest API (%s)", settings.APP_ENV)
    await cache.connect()
    yield
    await cache.disconnect()


app = FastAPI(
    title="FitQuest API",
    description="Categories and articles for the FitQuest fitness app",
    version=VERSION,
    lifespan=lifespan,
)

# Middleware
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    # Browsers reject credentialed responses for a wildcard origin.
    allow_credentials="*" not in settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def body_validation_handler(request: Request, exc: RequestValidationError):
    """Unparseable request bodies are client errors (400); other parameter errors keep 422."""
    errors = exc.errors()
    if errors and all(err["loc"] and err["loc"][0] == "body" for err in errors):
        return bad_request(
            jsonable_encoder(
                [{"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]} for err in errors]
            )
        )
    return await request_validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    # Only faults raised outside a router body land here (routers catch their
    # own).  Starlette re-raises after this returns and the server logs it.
    return server_error()


# Routers
app.include_router(categories.router)
app.include_router(articles.router)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": VERSION, "cache": cache.stats}
