from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
	model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

	APP_NAME: str = Field(default="NutriTrack API")
	DEBUG: bool = Field(default=False)
	API_PREFIX: str = Field(default="/api/v1")
	LOG_LEVEL: str = Field(default="INFO")
	CORS_ORIGINS: list[str] = Field(default_factory=lambda: ["*"])

	# Database
	DATABASE_URL: str = Field(default="")

	# Auth / JWT
	JWT_SECRET: str = Field(default="dev-change-me")
	JWT_ALGORITHM: str = Field(default="HS256")
	ACCESS_TOKEN_EXPIRES_MINUTES: int = Field(default=60)

	# Nutrition plan quota: lock the caller's user row while counting.
	# Off by default; concurrent creations at the limit may overshoot by one.
	QUOTA_LOCK_USER_ROW: bool = Field(default=False)

	# Azure Monitor / Application Insights
	AZURE_MONITOR_CONN_STR: str = Field(default="")
	ENABLE_APP_INSIGHTS: bool = Field(default=False)
	SAMPLING_RATIO: float = Field(default=1.0)


settings = Settings()
