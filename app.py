import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from db import create_db_and_tables
from exceptions import MonetizeProException
from middleware.security_headers import SecurityHeadersMiddleware
from utils.error_handler import handle_service_error, handle_unexpected_error, http_status_for
from web.api_router import api_router
from web.shell_registry import get_registry


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown."""
    await create_db_and_tables()
    logging.info(f"[Startup] MonetizePro API ready ({config.RUNTIME_ENVIRONMENT.value})")

    yield

    logging.warning('Shutting down..')
    await get_registry().close_all()
    logging.warning('Bye!')


app = FastAPI(lifespan=lifespan, title="MonetizePro")

app.add_middleware(SecurityHeadersMiddleware)

if config.WEBAPP_CORS_ALLOWED_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.WEBAPP_CORS_ALLOWED_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-Shell-Id"],
    )
    logging.info(f"[Startup] CORS middleware enabled for origins: {config.WEBAPP_CORS_ALLOWED_ORIGINS}")
else:
    logging.debug("[Startup] CORS middleware disabled (no allowed origins configured)")

app.include_router(api_router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


@app.exception_handler(MonetizeProException)
async def service_exception_handler(request: Request, exc: MonetizeProException):
    error_state = handle_service_error(exc)
    return JSONResponse(
        status_code=http_status_for(exc),
        content={"error": error_state.model_dump()},
    )


@app.exception_handler(Exception)
async def exception_handler(request: Request, exc: Exception):
    error_state = handle_unexpected_error(exc)
    return JSONResponse(
        status_code=500,
        content={"error": error_state.model_dump()},
    )


def main() -> None:
    uvicorn.run(app, host=config.WEBAPP_HOST, port=config.WEBAPP_PORT)
