"""
/**
 * @file app.py
 * @summary FastAPI application factory and error mapping.
 *
 * @details
 * - create_app() wires settings, orchestrator, rate limiter and caches;
 *   any of them can be injected (tests pass fakes).
 * - Errors map to JSON bodies of the form {"error": message}:
 *   ApiError keeps its status, a missing API key is 503, an unknown member is
 *   404, other application errors are 500 with their summary, and anything
 *   unexpected is a generic 500.
 */
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from civiclens.access.rate_limit import RateLimiter
from civiclens.api.deps import ApiError, ApiState
from civiclens.api.routes import health_router, router
from civiclens.services.cache import CategoryCache
from civiclens.services.durable_cache import DurableCache
from civiclens.services.orchestrator import Orchestrator
from civiclens.utils.config import Settings
from civiclens.utils.errors import CivicLensError, ConfigurationError, ProfileFetchError

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, orchestrator: Optional[Orchestrator] = None,
               rate_limiter: Optional[RateLimiter] = None, durable_cache: Optional[DurableCache] = None,
               route_cache: Optional[CategoryCache] = None) -> FastAPI:
    """
    /**
     * Build the API application.
     *
     * @param settings: Defaults to Settings.from_env().
     * @param orchestrator: Defaults to one built from settings.
     * @param rate_limiter: Defaults to an in-memory limiter with tier limits.
     * @param durable_cache: Defaults to Redis at settings.redis_url (disabled when unset).
     * @param route_cache: Defaults to a per-category in-process cache.
     */
    """
    settings = settings or Settings.from_env()
    state = ApiState(
        settings=settings,
        orchestrator=orchestrator if orchestrator is not None else Orchestrator.from_settings(settings),
        rate_limiter=rate_limiter if rate_limiter is not None else RateLimiter(),
        durable_cache=durable_cache if durable_cache is not None else DurableCache.from_url(settings.redis_url),
        route_cache=route_cache if route_cache is not None else CategoryCache(),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"CivicLens API starting (auth={settings.auth_provider}, "
                    f"durable_cache={'redis' if state.durable_cache.enabled else 'off'})")
        yield
        await state.orchestrator.close()
        await state.durable_cache.close()
        logger.info("CivicLens API stopped")

    app = FastAPI(
        title="CivicLens API",
        description="Unified profiles of elected officials from public civic data",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.civiclens = state
    app.include_router(router)
    app.include_router(health_router)

    @app.exception_handler(ApiError)
    async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(status_code=exc.status, content={"error": exc.message, **exc.extra},
                            headers=exc.headers)

    @app.exception_handler(ConfigurationError)
    async def _configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
        logger.error(f"{request.url.path}: {exc}")
        return JSONResponse(status_code=503, content={"error": "Data provider not configured", "detail": str(exc)})

    @app.exception_handler(ProfileFetchError)
    async def _profile_error_handler(request: Request, exc: ProfileFetchError) -> JSONResponse:
        if exc.not_found:
            return JSONResponse(status_code=404, content={"error": str(exc)})
        logger.error(f"{request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.exception_handler(CivicLensError)
    async def _civiclens_error_handler(request: Request, exc: CivicLensError) -> JSONResponse:
        logger.error(f"{request.url.path}: {type(exc).__name__}: {exc}")
        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.exception_handler(Exception)
    async def _global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    return app
