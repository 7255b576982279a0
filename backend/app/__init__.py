"""
Puzzle2Profit Research Pipeline - Application Factory
"""

import logging
import sys
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import config
from utils.errors import error_payload
from utils.rate_limit import limiter
from middleware.error_handler import ErrorHandlerMiddleware
from app.api.routes import affiliates, content, health, research, tech_stacks


# Configure logging
def setup_logging():
    """Setup structured logging for production"""
    log_level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)

    # Clear any existing handlers
    logging.root.handlers = []

    if config.STRUCTURED_LOGGING:
        # JSON-like structured logging for production
        formatter = logging.Formatter(
            '{"time":"%(asctime)s", "level":"%(levelname)s", "name":"%(name)s", "message":"%(message)s"}'
        )
    else:
        # Human-readable logging for development
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    logging.root.setLevel(log_level)
    logging.root.addHandler(console_handler)

    # Set specific levels for noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""

    # Setup logging first
    setup_logging()
    logger = logging.getLogger(__name__)

    # Validate configuration
    config_errors = config.validate()
    if config_errors:
        logger.error(f"Configuration errors: {', '.join(config_errors)}")
        if config.IS_PRODUCTION:
            raise ValueError(f"Production configuration invalid: {', '.join(config_errors)}")
        else:
            logger.warning("Configuration warnings (development mode - proceeding anyway)")

    logger.info(f"Starting application with config: {config.get_summary()}")

    app = FastAPI(
        title="Puzzle2Profit Research Pipeline",
        description="LLM research, copywriting and affiliate contract pipeline for solopreneur content",
        version="1.0.0"
    )

    # Add error handling middleware (first, to catch all errors)
    app.add_middleware(ErrorHandlerMiddleware)

    if config.ALLOWED_ORIGINS == ["*"]:
        logger.warning("ALLOWED_ORIGINS not set - answering every origin")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=False,  # Bearer tokens only
        allow_methods=config.CORS_ALLOWED_METHODS,
        allow_headers=config.CORS_ALLOWED_HEADERS,
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    # Every error leaves as {"error": ...}
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code >= 500:
            logger.error(f"{request.url.path} failed ({exc.status_code}): {exc.detail}")
        return JSONResponse(status_code=exc.status_code, content=error_payload(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _describe_validation_errors(exc)})

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse(
            status_code=429,
            content={"error": f"Rate limit exceeded: {exc.detail}"}
        )

    # Include API routes
    app.include_router(health.router, tags=["health"])
    app.include_router(research.router, prefix="/api/research", tags=["research"])
    app.include_router(content.router, prefix="/api/content", tags=["content"])
    app.include_router(affiliates.router, prefix="/api/affiliates", tags=["affiliates"])
    app.include_router(tech_stacks.router, prefix="/api/tech-stacks", tags=["tech-stacks"])

    # Bare OPTIONS (no preflight headers) still gets the fixed CORS answer
    @app.options("/{rest_of_path:path}", include_in_schema=False)
    @limiter.exempt
    def options_fallback(rest_of_path: str):
        headers = {
            "Access-Control-Allow-Methods": ", ".join(config.CORS_ALLOWED_METHODS),
            "Access-Control-Allow-Headers": ", ".join(config.CORS_ALLOWED_HEADERS),
        }
        if config.ALLOWED_ORIGINS == ["*"]:
            headers["Access-Control-Allow-Origin"] = "*"
        return Response(status_code=200, headers=headers)

    return app
