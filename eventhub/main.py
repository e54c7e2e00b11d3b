import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from eventhub.core.config import CORS_ORIGINS, LOG_LEVEL
from eventhub.core.exceptions import EventHubError
from eventhub.core.logging_config import setup_logging
from eventhub.database.db import Base, engine
from eventhub.models import events, registrations, users  # noqa: F401  (register tables)
from eventhub.routes import auth
from eventhub.routes import events as event_routes
from eventhub.routes import registrations as registration_routes
from eventhub.routes import reports

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create all tables (in production, use migrations such as Alembic)
    Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    setup_logging(LOG_LEVEL)

    app = FastAPI(title="EventHub", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(EventHubError)
    async def eventhub_error_handler(request: Request, exc: EventHubError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "detail": "All required fields must be provided",
                "code": "INVALID_INPUT",
                "errors": jsonable_encoder(exc.errors()),
            },
        )

    # Include the routers
    app.include_router(auth.router)
    app.include_router(event_routes.router)
    app.include_router(registration_routes.router)
    app.include_router(reports.router)

    return app


app = create_app()
