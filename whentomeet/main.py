import logging

logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
)
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from whentomeet import __version__
from whentomeet.config import get_settings
from whentomeet.controllers.health import router as health_router
from whentomeet.controllers.polls import router as polls_router
from whentomeet.errors import register_exception_handlers
from whentomeet.lifespan import cleanup_resources, setup_resources
from whentomeet.middleware import RequestLogMiddleware


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    resources = await setup_resources()
    try:
        yield
    finally:
        await cleanup_resources(resources)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="WhenToMeet API", version=__version__, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins,
        allow_origin_regex=settings.cors.origins_regex or None,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if settings.debug.request:
        logging.getLogger("whentomeet.http").setLevel(logging.DEBUG)
        app.add_middleware(RequestLogMiddleware)

    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(polls_router, prefix="/w2m")
    return app


app = create_app()

Instrumentator().instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)
