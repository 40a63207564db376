"""Where Next FastAPI Application.

Main entry point for the backend API server. The suggestions endpoint
answers every request itself, so the only error envelope here is the 500
for failures outside it (bad seed data at startup, a broken stats read).
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from where_next import __version__
from where_next.api import close_services, get_suggestion_handler, router
from where_next.config import get_settings
from where_next.models import AppError, ErrorCode

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Seeds and AI provider are resolved up front so bad config fails at boot
    handler = get_suggestion_handler()
    logger.info(f"[APP] Started, AI {'enabled' if handler.ai_enabled else 'disabled'}")
    yield
    await close_services()
    logger.info("[APP] Shut down")


app = FastAPI(
    title="Where Next API",
    description="AI-assisted travel destination suggestions",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"[APP] Unhandled error on {request.method} {request.url.path}")
    error = AppError(
        code=ErrorCode.API_ERROR,
        message=str(exc),
        user_message="Something went wrong. Please try again.",
    )
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": error.model_dump(mode="json")},
    )


app.include_router(router, prefix="/api")


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


def main() -> None:
    import uvicorn

    uvicorn.run("where_next.main:app", host="0.0.0.0", port=8000, reload=True)


if __name__ == "__main__":
    main()
