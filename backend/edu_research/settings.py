from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	# Provider can be "vertex" (Vertex AI Express) or "ai_studio" (Generative Language API)
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	gemini_model: str = Field(default="gemini-2.5-pro", validation_alias="GEMINI_MODEL")
	gemini_temperature: float = Field(default=0.7, validation_alias="GEMINI_TEMPERATURE")
	# Unset means the client waits as long as the backend does
	gemini_timeout_seconds: float | None = Field(default=None, validation_alias="GEMINI_TIMEOUT_SECONDS")
	# Vertex configuration
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")

	# Most-recent-first history is cut to this many entries before saving
	history_limit: int = Field(default=20, validation_alias="HISTORY_LIMIT")
	# Locale for classified error messages: ar, en or fr
	error_locale: str = Field(default="ar", validation_alias="ERROR_LOCALE")
	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
