import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1.academic_years.router import router as academic_years_router
from app.api.v1.access_checks.router import router as access_checks_router
from app.api.v1.terms.router import router as terms_router
from app.core.exceptions import ServiceError
from app.core.logging import configure_logging

logger = logging.getLogger("records.web")

GENERIC_ERROR_MESSAGE = "Internal server error"


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as {"error": message}. System errors never leak details."""

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code >= 500:
            return JSONResponse({"error": GENERIC_ERROR_MESSAGE}, status_code=exc.status_code)
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse({"error": _validation_message(exc)}, status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(ServiceError)
    async def _service_error(request: Request, exc: ServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            return JSONResponse({"error": GENERIC_ERROR_MESSAGE}, status_code=exc.status_code)
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse({"error": GENERIC_ERROR_MESSAGE}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Records Core")

    # CORS: allow frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Routers
    app.include_router(academic_years_router)
    app.include_router(terms_router)
    app.include_router(access_checks_router)

    return app


app = create_app()
