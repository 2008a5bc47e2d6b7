import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lpkit.api.v1.router import router as v1_router
from lpkit.core.config import Settings, load_settings
from lpkit.core.errors import ModelError, SolverUnavailable


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="lpkit API", version="0.1.0")
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ModelError)
    def model_error_handler(_, exc: ModelError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(SolverUnavailable)
    def solver_unavailable_handler(_, exc: SolverUnavailable):
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    app.include_router(v1_router, prefix="/v1")
    return app


def run() -> None:
    import uvicorn

    settings = load_settings()
    uvicorn.run("lpkit.main:app", host="0.0.0.0", port=settings.port, reload=settings.reload)


app = create_app()

if __name__ == "__main__":  # pragma: no cover
    run()
