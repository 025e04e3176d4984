import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bank import reload_banks
from db import init_db

# Routers
from routers.admin import router as admin_router
from routers.assessment import router as assessment_router
from routers.attempts import router as attempts_router
from routers.health import router as health_router
from routers.questions import router as questions_router

logger = logging.getLogger("grammar-assessment")
logging.basicConfig(level=logging.INFO)

_DEFAULT_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000"


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("question banks loaded: %s", reload_banks())
    yield


app = FastAPI(title="Grammar Assessment API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", _DEFAULT_ORIGINS).split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*", "x-api-key", "x-admin-token"],
)


@app.get("/")
def health_root():
    return {"ok": True}


app.include_router(assessment_router)  # /assessment/..., /proficiency
app.include_router(questions_router)  # /questions/...
app.include_router(admin_router)  # /admin/...
app.include_router(attempts_router)  # /attempts/...
app.include_router(health_router)  # /health/...
