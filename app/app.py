import contextlib
from datetime import timedelta
import functools
import logging
from typing import Any, AsyncIterator, Awaitable, Callable

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Mount, Route
from starlette.staticfiles import StaticFiles

from app import config
from app.ratelimit import limiter_factory, rate_limit_exceeded
from app.security import SecurityHeadersMiddleware
from domain import services
from domain.aopenai import ModelClient, OpenAIModelClient, openai_client_factory
from domain.auth import AuthService
from domain.errors import (
    ChefbotError,
    Forbidden,
    ModelUnavailableError,
    StoreError,
    Unauthorized,
    ValidationError,
)
from domain.pipeline import RecipePipeline
from domain.repository import Store


logger = logging.getLogger(__name__)


SERVICE_NAME = "chefbot"
VERSION = "1.0.0"


def error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def requires_token(route: Callable[[Request], Awaitable[Response]]):
    """Put the verified claims on `request.state.user` or refuse the request."""

    @functools.wraps(route)
    async def wrapper(request: Request) -> Response:
        auth: AuthService = request.app.state.auth
        try:
            request.state.user = auth.verify(bearer_token(request))
        except Unauthorized:
            return error("Access Denied", 401)
        except Forbidden:
            return error("Invalid Token", 403)
        return await route(request)

    return wrapper


async def json_body(request: Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError as e:
        raise ValidationError("Invalid input") from e
    if not isinstance(body, dict):
        raise ValidationError("Invalid input")
    return body


async def health(request: Request) -> JSONResponse:
    return JSONResponse(
        {"status": "healthy", "service": SERVICE_NAME, "version": VERSION}
    )


async def login(request: Request) -> JSONResponse:
    try:
        body = await json_body(request)
        result = await services.login(
            body.get("name"), body.get("phone"), auth=request.app.state.auth
        )
    except ValidationError as e:
        return error(str(e), 400)
    except ChefbotError:
        return error("Login failed", 500)

    user = result["user"]
    return JSONResponse(
        {
            "success": True,
            "token": result["token"],
            "expiresAt": result["expires_at"].isoformat(),
            "user": {"id": user.id, "name": user.name, "phone": user.phone},
        }
    )


@requires_token
async def history(request: Request) -> JSONResponse:
    raw_limit = request.query_params.get("limit")
    try:
        limit = None if raw_limit is None else int(raw_limit)
        records = await services.recipe_history(
            request.state.user["phone"],
            store=request.app.state.store,
            limit=limit,
        )
    except ValueError:
        return error("limit must be a positive integer", 400)
    except ValidationError as e:
        return error(str(e), 400)
    except StoreError:
        return error("Failed to fetch history", 500)
    return JSONResponse([r.to_dict() for r in records])


@requires_token
async def recipe(request: Request) -> JSONResponse:
    try:
        body = await json_body(request)
        record = await services.create_recipe(
            body.get("dish"),
            owner_phone=request.state.user["phone"],
            pipeline=request.app.state.pipeline,
            store=request.app.state.store,
            default_category=request.app.state.config.default_category,
        )
    except ValidationError as e:
        return error(str(e), 400)
    except (ModelUnavailableError, StoreError):
        return error("Chef is busy (Server Error)", 500)

    return JSONResponse(
        {
            "id": record.id,
            "dishName": record.dish_name,
            "category": record.category,
            "recipe": record.recipe,
            "html": record.html,
            "createdAt": record.created_at,
        }
    )


async def server_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return error("Internal Server Error", 500)


def build_model_client(cfg: config.Config) -> OpenAIModelClient:
    if not cfg.openai_api_key:
        logger.critical("OPENAI_API_KEY is missing. Recipes can not be generated.")
    openai_client = openai_client_factory(
        cfg.openai_api_key,
        base_url=cfg.openai_base_url,
        timeout=cfg.llm_timeout_seconds,
    )
    return OpenAIModelClient(openai_client, model=cfg.core_model)


def create_app(
    cfg: config.Config | None = None,
    *,
    model: ModelClient | None = None,
    store: Store | None = None,
    limiter: Limiter | None = None,
) -> Starlette:
    cfg = config.Config() if cfg is None else cfg

    if cfg.jwt_secret == config.DEFAULT_JWT_SECRET:
        logger.warning("Using the default JWT secret. Set JWT_SECRET.")

    owns_model = model is None
    model = build_model_client(cfg) if model is None else model
    store = Store.from_url(cfg.db_url) if store is None else store
    limiter = (
        limiter_factory(
            max_requests=cfg.rate_limit_max_requests,
            window_seconds=cfg.rate_limit_window_seconds,
            trust_forwarded_for=cfg.trust_forwarded_for,
        )
        if limiter is None
        else limiter
    )

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        await store.connect()
        await store.create_tables()
        logger.info("Store connected")
        try:
            yield
        finally:
            try:
                await store.disconnect()
            finally:
                if owns_model and isinstance(model, OpenAIModelClient):
                    await model.close()

    routes = [
        Route("/api/health", health),
        Route("/api/login", login, methods=["POST"]),
        Route("/api/history", history),
        Route("/api/recipe", recipe, methods=["POST"]),
        Route("/api/get-recipe", recipe, methods=["POST"]),
    ]
    if cfg.static_dir.is_dir():
        routes.append(
            Mount("/", app=StaticFiles(directory=cfg.static_dir, html=True))
        )

    app = Starlette(
        routes=routes,
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=cfg.cors_origins,
                allow_methods=["*"],
                allow_headers=["*"],
            ),
            Middleware(SecurityHeadersMiddleware),
            Middleware(SlowAPIMiddleware),
        ],
        exception_handlers={
            RateLimitExceeded: rate_limit_exceeded,
            Exception: server_error,
        },
        lifespan=lifespan,
    )

    app.state.config = cfg
    app.state.limiter = limiter
    app.state.model = model
    app.state.store = store
    app.state.pipeline = RecipePipeline.from_variant(cfg.pipeline_variant, model=model)
    app.state.auth = AuthService(
        store,
        secret=cfg.jwt_secret,
        ttl=timedelta(hours=cfg.token_ttl_hours),
    )
    return app
