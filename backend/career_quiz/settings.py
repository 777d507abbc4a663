from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Google Sheet holding the Questions / Options / Jobs / OptionJobMap tabs
	spreadsheet_id: str = Field(default="1E5eZFKRqsm2mR6WwldrkMP_-yyTqPfU5HOnRI9z7sl0", validation_alias="SPREADSHEET_ID")
	sheets_base_url: str = Field(default="https://docs.google.com/spreadsheets/d", validation_alias="SHEETS_BASE_URL")
	sheets_timeout_seconds: float = Field(default=30, validation_alias="SHEETS_TIMEOUT_SECONDS")

	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	# Provider can be "vertex" (Vertex AI Express) or "ai_studio" (Generative Language API)
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	gemini_model: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")

	# OpenRouter fallback configuration (optional)
	openrouter_api_key: str | None = Field(default=None, validation_alias="OPENROUTER_API_KEY")
	openrouter_model: str = Field(default="x-ai/grok-4-fast:free", validation_alias="OPENROUTER_MODEL")
	openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1/chat/completions", validation_alias="OPENROUTER_BASE_URL")
	openrouter_referer: str = Field(default="https://localhost", validation_alias="OPENROUTER_HTTP_REFERER")
	openrouter_title: str = Field(default="Career Explorer Quiz", validation_alias="OPENROUTER_TITLE")

	# Google Apps Script web app that appends finished results to a sheet
	results_webhook_url: str | None = Field(default=None, validation_alias="RESULTS_WEBHOOK_URL")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
