# toonview/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI

from . import __version__
from .catalog import catalog_router
from .catalog.router import get_session
from .logging_config import setup_logging


logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Load the first page so the catalogue is populated on first view
    session_factory = app.dependency_overrides.get(get_session, get_session)
    await session_factory().refresh()
    yield


app = FastAPI(
    title="toonview",
    description=(
        "Catalogue viewer/editor for the Disney character API. "
        "Additions and removals are kept on the client only."
    ),
    version=__version__,
    lifespan=lifespan,
)


@app.get("/")
def health_check():
    return {"status": "ok", "message": "toonview catalogue is up"}


app.include_router(catalog_router)
