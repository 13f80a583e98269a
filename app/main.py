from contextlib import asynccontextmanager

import redis
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.assistants.client import AssistantClient
from app.assistants.title_writer import TitleWriter
from app.config import get_settings
from app.infra.logging_config import LoggingConfig, get_logger
from app.routers.chat_router import chat_router
from app.services.thread_registry import SessionLockRegistry


def _build_redis_client(settings):
    if not settings.redis_host or not settings.chat_rate_limit_per_user:
        return None
    return redis.Redis(
        host=settings.redis_host, port=settings.redis_port, decode_responses=True
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger = get_logger("main")

    app.state.session_locks = SessionLockRegistry()
    app.state.assistant_client = None
    app.state.title_writer = None
    if settings.is_assistant_configured:
        app.state.assistant_client = AssistantClient.from_settings(settings)
        app.state.title_writer = TitleWriter.from_settings(settings)
    else:
        logger.warning(
            "OPENAI_API_KEY / OPENAI_ASSISTANT_ID not set; chat sends will fail"
        )
    app.state.redis_client = _build_redis_client(settings)

    yield

    if app.state.assistant_client is not None:
        await app.state.assistant_client.close()
    if app.state.redis_client is not None:
        app.state.redis_client.close()


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def create_app(testing: bool = False) -> FastAPI:
    LoggingConfig()
    settings = get_settings()

    # Tests install their own state and skip the lifespan resources
    app = FastAPI(
        title=settings.app_name,
        lifespan=None if testing else lifespan,
    )
    if testing:
        app.state.session_locks = SessionLockRegistry()
        app.state.assistant_client = None
        app.state.title_writer = None
        app.state.redis_client = None

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.include_router(chat_router)

    return app


app = create_app()
