import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from database import engine, Base
from routes.health import router as health_router
from routes.matches import router as matches_router
from routes.proxy import router as proxy_router
from routes.songs import router as songs_router

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Solfege Finder API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_origin],
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup() -> None:
    os.makedirs(settings.data_dir, exist_ok=True)
    Base.metadata.create_all(bind=engine)


app.include_router(health_router)
app.include_router(songs_router)
app.include_router(matches_router)
app.include_router(proxy_router)
