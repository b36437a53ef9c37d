import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from docvec.api.handlers import RpcDispatcher
from docvec.api.routes import router as api_router
from docvec.config import public_settings, setup_logging
from docvec.indexing.pipeline import DocumentPipeline
from docvec.registry import ServiceRegistry

logger = setup_logging()


def create_app(registry: ServiceRegistry | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        services = registry or ServiceRegistry()
        app.state.registry = services
        app.state.dispatcher = RpcDispatcher(DocumentPipeline(services))
        logger.info("Application starting")
        logger.info("Loaded settings: %s", public_settings())
        try:
            yield
        finally:
            logger.info("Application shutting down")
            await services.aclose()

    app = FastAPI(title="docvec", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error", extra={"path": request.url.path})
        return JSONResponse(
            status_code=500,
            content={"jsonrpc": "2.0", "id": None, "error": {"code": "INTERNAL_ERROR", "message": "Internal server error"}},
        )

    app.include_router(api_router)
    return app


app = create_app()
