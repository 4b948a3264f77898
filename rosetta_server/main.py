"""
FastAPI application main module.
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from rosetta_crypto import CryptoError

from .chains import blockchain_config
from .config import MIDDLEWARE_VERSION, Settings
from .connectors import BlockchainConnector, load_connector
from .database.cache import ResponseCache
from .middleware import RequestLoggingMiddleware
from .routers.account import router as account_router
from .routers.block import router as block_router
from .routers.call import router as call_router
from .routers.construction import router as construction_router
from .routers.mempool import router as mempool_router
from .routers.network import router as network_router
from .services.gateway import RosettaGateway
from .utils.errors import InternalError, MalformedRequest, RosettaError, error_body
from .utils.logging_config import setup_logging
from .utils.retry import RetryPolicy

# Configure logging
logger = setup_logging('rosetta_server.main')


def create_app(settings: Optional[Settings] = None,
               connector: Optional[BlockchainConnector] = None,
               cache: Optional[ResponseCache] = None) -> FastAPI:
    """
    Build the application for one network.

    The connector and cache are created from ``settings`` unless given, opened
    on startup and closed on shutdown.
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Lifespan context manager for FastAPI app.
        Handles startup and shutdown events.
        """
        logger.info(f"Starting Rosetta gateway for {settings.blockchain}/{settings.network}...")
        node = connector
        if node is None:
            config = blockchain_config(settings.blockchain, settings.network)
            node = load_connector(settings.connector, config, settings.node_addr, timeout=settings.node_timeout)
        response_cache = cache
        if response_cache is None and settings.cache_enabled:
            response_cache = ResponseCache(settings.cache_path)

        await node.connect()
        app.state.gateway = RosettaGateway(
            node,
            response_cache,
            RetryPolicy(settings.max_attempts, settings.base_delay, settings.max_delay)
        )
        logger.info("Connector ready")
        try:
            yield
        finally:
            app.state.gateway = None
            try:
                await node.close()
            except Exception as e:
                logger.error(f"Error closing connector: {str(e)}")
            if response_cache is not None:
                response_cache.close()
            logger.info("Application shutdown complete")

    app = FastAPI(
        title="Rosetta Gateway",
        description="Chain agnostic Rosetta Data and Construction API",
        version=MIDDLEWARE_VERSION,
        lifespan=lifespan,
    )
    app.state.gateway = None
    app.state.settings = settings

    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(RosettaError)
    async def rosetta_error_handler(request: Request, exc: RosettaError):
        return JSONResponse(status_code=500, content=error_body(exc))

    @app.exception_handler(CryptoError)
    async def crypto_error_handler(request: Request, exc: CryptoError):
        return JSONResponse(status_code=500, content=error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg"), "type": error.get("type")}
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=500,
            content=error_body(MalformedRequest("Malformed request", {"errors": errors}))
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.url.path}: {str(exc)}")
        return JSONResponse(status_code=500, content=error_body(InternalError(str(exc))))

    # Add Prometheus metrics
    app.mount("/metrics", make_asgi_app())

    app.include_router(network_router)
    app.include_router(account_router)
    app.include_router(block_router)
    app.include_router(mempool_router)
    app.include_router(construction_router)
    app.include_router(call_router)

    return app
