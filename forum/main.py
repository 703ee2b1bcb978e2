import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from forum.cache import cache
from forum.config import settings
from forum.middleware import RequestContextMiddleware
from forum.routers import articles, comments, members, reactions, replies

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    try:
        await cache.connect()
    except Exception as exc:
        # The API works without Redis; reaction counts fall back to the database.
        logger.warning("Cache unavailable at startup: %s", exc)
    yield
    await cache.disconnect()

app = FastAPI(
    title="Forum API",
    description="Members, articles, threaded comments and reactions",
    version="1.0.0",
    lifespan=lifespan,
)

# Middleware
app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time-Ms", "X-Query-Count"],
)

# Routers
app.include_router(members.router)
app.include_router(articles.router)
app.include_router(comments.router)
app.include_router(replies.router)
app.include_router(reactions.router)

@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0", "cache": cache.stats}
