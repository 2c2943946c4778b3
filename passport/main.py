from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from passport.config import get_settings
from passport.log import configure_logging
from passport.routers import analyze, badge, health, passport_page

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings)
    logger.info(
        "Starting Humanity Passport",
        model=settings.openai_model,
        skip_code_summary=settings.skip_code_summary,
    )
    yield
    logger.info("Shutting down Humanity Passport")


app = FastAPI(
    title="Humanity Passport",
    description="Rate GitHub repositories for positive impact and serve verdict badges",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router, tags=["health"])
app.include_router(analyze.router, tags=["analyze"])
app.include_router(badge.router, tags=["badge"])
app.include_router(passport_page.router, tags=["passport"])


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception",
        error=str(exc),
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal Server Error", "code": "INTERNAL_SERVER_ERROR"},
    )
