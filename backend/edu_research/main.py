from pathlib import Path
import logging

from fastapi import FastAPI, Depends
from fastapi.staticfiles import StaticFiles
from fastapi.responses import RedirectResponse

from .db import Base, engine
from .settings import settings
from .state import get_workspace
from .workspace import Workspace
from .routers import health
from .routers import documents
from .routers import history
from .routers import settings as settings_router

BASE_DIR = Path(__file__).resolve().parents[2]
FRONTEND_DIR = BASE_DIR / "frontend"

logger = logging.getLogger(__name__)

app = FastAPI(title="Educational Research Generator API")
app.include_router(health.router)
app.include_router(documents.router)
app.include_router(history.router)
app.include_router(settings_router.router)

# Static frontend at /app (use absolute paths so cwd doesn't matter when launching)
if FRONTEND_DIR.is_dir():
	app.mount("/app", StaticFiles(directory=FRONTEND_DIR, html=True), name="frontend")

@app.get("/", include_in_schema=False)
async def redirect_root_to_app():
	return RedirectResponse(url="/app")

@app.get("/info")
def root(workspace: Workspace = Depends(get_workspace)):
	return {
		"status": "ok",
		"gemini_configured": workspace.has_credential(),
		"model": settings.gemini_model,
		"history_limit": workspace.history_limit,
	}

@app.on_event("startup")
async def startup_event():
	logging.basicConfig(
		level=settings.log_level.upper(),
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)
	# Initialize DB schema
	Base.metadata.create_all(bind=engine)
	logger.info("Using model %s via %s", settings.gemini_model, settings.gemini_provider)
