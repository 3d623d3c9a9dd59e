import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from gametracker.api import auth, game
from gametracker.core.auth_gate import AuthGate
from gametracker.core.config import Settings, get_settings
from gametracker.core.db import create_engine_from_dsn, create_sessionmaker, create_tables, wait_for_database
from gametracker.core.errors import GameTrackerError, InvalidTokenError
from gametracker.core.security import PasswordHasher, TokenService


logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await wait_for_database(app.state.engine, settings.DB_CONNECT_RETRIES, settings.DB_RETRY_DELAY)
        if settings.AUTO_CREATE_TABLES:
            await create_tables(app.state.engine)
        logger.info("GameTracker ready")
        yield
        await app.state.engine.dispose()

    app = FastAPI(
        title="GameTracker Backend",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = create_engine_from_dsn(settings.DATABASE_URL)
    app.state.sessionmaker = create_sessionmaker(app.state.engine)
    app.state.hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    app.state.tokens = TokenService(
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        ttl=timedelta(days=settings.TOKEN_TTL_DAYS),
    )
    app.state.auth_gate = AuthGate(app.state.tokens)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
    )

    app.include_router(auth.router)
    app.include_router(auth.protected)
    app.include_router(game.router)

    register_exception_handlers(app)

    @app.get("/")
    async def root():
        return {"message": "Hello, GameTracker!"}

    return app


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(GameTrackerError)
    async def handle_app_error(request: Request, exc: GameTrackerError):
        if isinstance(exc, InvalidTokenError):
            logger.debug("%s %s -> invalid token (%s)", request.method, request.url.path, exc.reason.value)
        elif exc.status_code >= 500:
            logger.error("%s %s -> %s", request.method, request.url.path, exc.code.value)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        details = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid data", "details": jsonable_encoder(details)},
        )

    @app.exception_handler(HTTPException)
    async def handle_http_exception(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

