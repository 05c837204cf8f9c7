from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from slowapi.errors import RateLimitExceeded
from starlette.middleware.sessions import SessionMiddleware
from .config import settings
from .errors import AgencyError, RateLimited, ValidationError
from .ratelimit import limiter
import logging
import time
import os
import uuid
from .routers.auth import router as auth_router
from .routers.projects import router as projects_router
from .routers.blog import router as blog_router
from .routers.team import router as team_router
from .routers.services import router as services_router
from .routers.contact import router as contact_router
from .routers.company import router as company_router
from .routers.pages import router as pages_router
from .routers.admin import router as admin_router
from pathlib import Path


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=(level or settings.LOG_LEVEL).upper(), format=LOG_FORMAT)


def _field_errors(exc: RequestValidationError) -> dict:
    fields = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("query", "path", "body")]
        fields.setdefault(".".join(loc) or "__root__", err.get("msg", "Invalid value"))
    return fields


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Agency Website", version="0.1.0")
    logger = logging.getLogger(__name__)

    static_dir = Path(__file__).resolve().parent / "static"
    templates_dir = Path(__file__).resolve().parent / "templates"

    app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")
    app.state.templates = Jinja2Templates(directory=str(templates_dir))
    app.state.limiter = limiter
    app.add_middleware(SessionMiddleware, secret_key=settings.APP_SECRET)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AgencyError)
    async def agency_error_handler(request: Request, exc: AgencyError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        logging.getLogger("agency.security").warning(
            "rate limit hit path=%s ip=%s detail=%s",
            request.url.path,
            request.client.host if request.client else "-",
            exc.detail,
        )
        error = RateLimited(exc.detail)
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        error = ValidationError(_field_errors(exc))
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled error path=%s: %s", request.url.path, exc)
        message = "Internal server error" if settings.is_production else str(exc)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "internal_error", "message": message},
        )

    @app.middleware("http")
    async def timing_middleware(request: Request, call_next):
        t0 = time.perf_counter()
        req_id = uuid.uuid4().hex[:8]
        response = await call_next(request)
        total = time.perf_counter() - t0
        response.headers["X-Process-Time"] = f"{total:.3f}"
        if request.url.path.startswith("/api/auth"):
            response.headers["Cache-Control"] = "no-store"
        elif request.url.path.startswith("/static/"):
            response.headers.setdefault("Cache-Control", "public, max-age=86400")
        if os.environ.get("REQ_TIMING", "0") == "1":
            logger.info(
                "req_timing id=%s method=%s path=%s status=%s total_ms=%.1f",
                req_id,
                request.method,
                request.url.path,
                response.status_code,
                total * 1000,
            )
        return response

    app.include_router(auth_router, prefix="/api", tags=["auth"])
    app.include_router(projects_router, prefix="/api", tags=["projects"])
    app.include_router(blog_router, prefix="/api", tags=["blog"])
    app.include_router(team_router, prefix="/api", tags=["team"])
    app.include_router(services_router, prefix="/api", tags=["services"])
    app.include_router(contact_router, prefix="/api", tags=["contact"])
    app.include_router(company_router, prefix="/api", tags=["company"])
    app.include_router(pages_router)
    app.include_router(admin_router)

    @app.get("/health", include_in_schema=False)
    def healthcheck():
        return {"status": "ok", "environment": settings.APP_ENV}

    return app


app = create_app()
