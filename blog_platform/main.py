import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from blog_platform.cache import cache
from blog_platform.errors import AppError
from blog_platform.logging_config import setup_logging
from blog_platform.middleware import TimingMiddleware
from blog_platform.routers import blogs, comments, posts

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    # connect() already downgrades to "no cache" when Redis is down.
    await cache.connect()
    yield
    await cache.disconnect()


app = FastAPI(
    title="Blog Platform API",
    description="Posts and comments with like/dislike reactions",
    version="1.0.0",
    lifespan=lifespan,
)

# Middleware
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(
            "%s %s failed: %s", request.method, request.url.path, exc.message,
            exc_info=exc.__cause__ or exc,
        )
    else:
        logger.info("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Routers
app.include_router(blogs.router)
app.include_router(posts.router)
app.include_router(comments.router)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0"}
