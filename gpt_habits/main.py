# gpt_habits/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gpt_habits.core.config import settings
from gpt_habits.core.errors import LiveQuizError
from gpt_habits.api.v1.endpoints import health, auth, live, surveys, admin_live, admin_reports
from gpt_habits.db.session import SessionLocal
from gpt_habits.services.auto_advance import start_auto_advance, stop_auto_advance

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

API_V1_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    task = None
    if settings.LIVE_AUTO_ADVANCE:
        task = start_auto_advance(
            SessionLocal,
            poll_seconds=settings.LIVE_AUTO_ADVANCE_POLL_SECONDS,
            delay_seconds=settings.LIVE_AUTO_ADVANCE_DELAY_SECONDS,
        )
    logger.info("%s started (env=%s)", settings.APP_NAME, settings.ENV)
    yield
    await stop_auto_advance(task)
    logger.info("%s shutting down", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    description="API para la encuesta GPT Habits y el quiz en vivo",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS (en prod: restringe orígenes con CORS_ORIGINS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LiveQuizError)
async def live_quiz_error_handler(request: Request, exc: LiveQuizError):
    # TimeExpired / InappropriateContent son esperables: el frontend usa 'code' para un aviso amable
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail, "code": exc.code})


# Routers versionados
app.include_router(health.router,  prefix=API_V1_PREFIX)
app.include_router(auth.router,    prefix=API_V1_PREFIX)
app.include_router(live.router,    prefix=API_V1_PREFIX)
app.include_router(surveys.router, prefix=API_V1_PREFIX)

# Admin: monta AQUÍ el prefijo /api/v1/admin
app.include_router(admin_live.router,    prefix=f"{API_V1_PREFIX}/admin")
app.include_router(admin_reports.router, prefix=f"{API_V1_PREFIX}/admin")


@app.get("/health")
def health_root():
    return {"status": "ok", "message": "API funcionando correctamente"}


@app.get("/")
def root():
    return {
        "message": "GPT Habits API",
        "version": "1.0.0",
        "docs": "/docs",
        "api_v1": API_V1_PREFIX,
    }
