import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.router import api_router
from app.core.config import settings
from app.core.error_handler import app_error_handler
from app.core.errors import AppError
from app.core.logging_config import setup_logging
from app.db.session import init_db
from app.services.openai_service import init_openai_service

setup_logging(settings.log_level)
logger = logging.getLogger("main")

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(AppError, app_error_handler)


@app.on_event("startup")
def on_startup():
    logger.info("Using database: %s", "Postgres" if settings.is_production else "SQLite")
    init_db()
    logger.info("Database tables created successfully")
    init_openai_service()
    if not settings.vapi_workflow_id:
        logger.warning("VAPI_WORKFLOW_ID not set; generate calls will start without a workflow")


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(api_router, prefix=settings.api_prefix)
