from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Chat-completions provider (Perplexity by default, any OpenAI-compatible endpoint works)
	llm_api_key: str | None = Field(default=None, validation_alias="PERPLEXITY_API_KEY")
	llm_model: str = Field(default="sonar", validation_alias="PERPLEXITY_MODEL")
	llm_base_url: str = Field(default="https://api.perplexity.ai/chat/completions", validation_alias="PERPLEXITY_BASE_URL")
	llm_timeout_seconds: float = Field(default=60.0, validation_alias="LLM_TIMEOUT_SECONDS")
	llm_max_tokens: int = Field(default=3000, validation_alias="LLM_MAX_TOKENS")

	# Auth configuration
	jwt_secret_key: str = Field(default="change-me", validation_alias="JWT_SECRET_KEY")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
	access_token_expire_minutes: int = Field(default=7 * 24 * 60, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")

	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
