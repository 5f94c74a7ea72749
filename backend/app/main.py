import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.router import router as v1_router
from app.core.errors import DomainError
from app.core.logging_config import configure_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging(
        level=os.environ.get("LOG_LEVEL", "INFO"),
        json_logs=os.environ.get("LOG_JSON", "true").lower() == "true",
    )

    app = FastAPI(title="List Query Normalizer API", version="0.1.0")
    app.state.strict_booleans = os.environ.get("STRICT_BOOLEANS", "false").lower() == "true"

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DomainError)
    def domain_error_handler(request: Request, exc: DomainError):
        content = {"detail": str(exc)}
        error_path = getattr(exc, "path", None)
        if error_path:
            content["path"] = error_path

        logger.info(
            "Rejected list query: %s",
            exc,
            extra={
                "method": request.method,
                "path": request.url.path,
                "error_path": error_path,
            },
        )
        return JSONResponse(status_code=400, content=content)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    app.include_router(v1_router, prefix="/v1")
    return app


def run() -> None:
    import uvicorn

    port = int(os.environ.get("PORT", 8000))
    reload = os.environ.get("RELOAD", "false").lower() == "true"

    uvicorn.run("app.main:app", host="0.0.0.0", port=port, reload=reload)


app = create_app()

if __name__ == "__main__":  # pragma: no cover
    run()
