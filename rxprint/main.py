# rxprint/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rxprint import __version__
from rxprint.api.deps import init_storage
from rxprint.api.exception_handlers import register_exception_handlers
from rxprint.api.router import api_router
from rxprint.core.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
app.include_router(api_router, prefix=settings.API_V1_STR)

init_storage()


# Health
@app.get("/")
def root():
    return {"message": "Prescription print & export API running", "version": __version__}
