from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from taskalloc.api.v1.router import router as v1_router
from taskalloc.core.config import get_settings, load_settings
from taskalloc.core.errors import DomainError
from taskalloc.core.logger import configure_logging


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title=settings.app_name, version=settings.app_version)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Last-resort mapping; validate_problem and solve_lp return outcomes instead.
    @app.exception_handler(DomainError)
    def domain_error_handler(_, exc: DomainError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    app.include_router(v1_router)
    return app


def run() -> None:
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "taskalloc.main:app", host=settings.host, port=settings.port, reload=settings.reload
    )


app = create_app()

if __name__ == "__main__":  # pragma: no cover
    run()
