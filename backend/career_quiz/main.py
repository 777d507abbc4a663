import logging

from fastapi import FastAPI

from .settings import settings
from .routers import quiz

logging.basicConfig(
	level=getattr(logging, settings.log_level.upper(), logging.INFO),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Career Explorer Quiz API")
app.include_router(quiz.router)

@app.get("/info")
def root():
	return {
		"status": "ok",
		"gemini_configured": bool(settings.gemini_api_key),
		"spreadsheet_id": settings.spreadsheet_id,
	}
