from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException
from starlette.responses import FileResponse, JSONResponse, Response
from starlette.status import HTTP_404_NOT_FOUND, HTTP_500_INTERNAL_SERVER_ERROR

from learntrack import __version__
from learntrack.bootstrap import seed_demo_user
from learntrack.config import Settings, build_engine, build_session_factory, create_db, get_settings
from learntrack.errors import AppError
from learntrack.routes.auth_routes import auth_routes
from learntrack.routes.progress_routes import progress_routes
from learntrack.utils.logger import bind_request_id, configure_logging, unbind_request_id

logger = configure_logging()


def _error_body(request: Request, status_code: int, code: str, message: str, details: Optional[dict] = None) -> dict:
    """Client-facing error payload; 5xx details only leave the process in development."""
    settings: Settings = request.app.state.settings
    body: dict = {"error": message, "code": code}
    if status_code >= 500:
        if settings.environment != "development":
            body["error"] = "Internal server error"
        else:
            body["detail"] = message
    elif details:
        body["details"] = details
    return body


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("app error status=%s code=%s method=%s path=%s detail=%s",
                         exc.status_code, exc.code, request.method, request.url.path, exc, exc_info=exc)
        else:
            logger.warning("app error status=%s code=%s method=%s path=%s detail=%s",
                           exc.status_code, exc.code, request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, exc.status_code, exc.code, exc.message, exc.details),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        logger.warning("http error status=%s method=%s path=%s detail=%s",
                       exc.status_code, request.method, request.url.path, exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, exc.status_code, "http_error", str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"field": ".".join(str(p) for p in err.get("loc", ())), "message": err.get("msg", "")}
            for err in exc.errors()
        ]
        logger.warning("validation error method=%s path=%s errors=%s", request.method, request.url.path, errors)
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "code": "validation_error", "details": {"fields": errors}},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled error method=%s path=%s", request.method, request.url.path)
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(request, HTTP_500_INTERNAL_SERVER_ERROR, "internal_error", str(exc)),
        )


def _resolve_page(static_root: Path, page_path: str) -> Optional[Path]:
    """Map /module-3 to module-3.html, / to index.html; never escape the static root."""
    candidates = [page_path or "index.html"]
    if page_path and not Path(page_path).suffix:
        candidates.insert(0, f"{page_path}.html")
    for candidate in candidates:
        path = (static_root / candidate).resolve()
        if path.is_relative_to(static_root) and path.is_file():
            return path
    return None


def _mount_static_pages(app: FastAPI, static_dir: str) -> None:
    static_root = Path(static_dir).resolve()

    @app.get("/{page_path:path}", include_in_schema=False)
    async def static_page(page_path: str) -> Response:
        path = _resolve_page(static_root, page_path.strip("/"))
        if path is not None:
            return FileResponse(path)
        not_found = static_root / "404.html"
        if not_found.is_file():
            return FileResponse(not_found, status_code=HTTP_404_NOT_FOUND)
        return JSONResponse(status_code=HTTP_404_NOT_FOUND, content={"error": "Page not found"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    engine = build_engine(settings.database_url)
    session_factory = build_session_factory(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        create_db(engine)
        if settings.seed_demo_user:
            seed_demo_user(session_factory, settings)
        logger.info("learntrack started environment=%s", settings.environment)
        yield
        engine.dispose()

    app = FastAPI(title="learntrack", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_logger(request: Request, call_next):
        rid, token = bind_request_id(request.headers.get("x-request-id"))
        try:
            logger.info("request start method=%s path=%s client=%s", request.method, request.url.path, request.client)
            response: Response = await call_next(request)
            logger.info("request end status=%s method=%s path=%s", response.status_code, request.method, request.url.path)
            response.headers["x-request-id"] = rid
            return response
        except Exception:
            logger.exception("request error method=%s path=%s", request.method, request.url.path)
            raise
        finally:
            unbind_request_id(token)

    _register_error_handlers(app)

    @app.get("/api/health")
    def health() -> dict:
        return {
            "status": "OK",
            "message": "learntrack backend is running",
            "environment": settings.environment,
            "version": __version__,
        }

    app.include_router(auth_routes, prefix="/api/auth")
    app.include_router(progress_routes, prefix="/api/progress")

    @app.api_route("/api/{rest:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"], include_in_schema=False)
    async def api_not_found(rest: str) -> JSONResponse:
        return JSONResponse(status_code=HTTP_404_NOT_FOUND, content={"error": "API endpoint not found"})

    if settings.static_dir:
        _mount_static_pages(app, settings.static_dir)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
