"""
Application configuration for the report feedback loop.

Credentials and tunables are read from the environment (and an optional .env
file) once at process start. Entry points build a single Config and hand it to
each component; components never look up environment variables themselves.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from feedback_loop.finetune.polling import PollingPolicy

from .exceptions import ConfigurationMissingError


DEFAULT_BASE_MODEL = "gpt-4o-mini-2024-07-18"


class ReportSettings(BaseModel):
	"""
	Settings for the report-generation path.

	Notes:
	- default_model is used when no fine-tuned model has been published yet.
	- temperature is 0.0 to keep report wording stable between requests.
	"""

	default_model: str = Field(DEFAULT_BASE_MODEL, min_length=1)
	temperature: float = Field(0.0, ge=0.0, le=2.0)
	max_tokens: int = Field(1000, ge=1, le=16384)


class Config(BaseSettings):
	"""
	Global configuration with environment overrides.

	Environment names match the field names (case-insensitive), e.g.
	SUPABASE_URL, OPENAI_API_KEY, NETLIFY_SITE_ID. Nested sections use a
	double underscore: POLLING__INTERVAL_SECONDS=10.
	"""

	model_config = SettingsConfigDict(
		env_file=".env",
		env_nested_delimiter="__",
		extra="ignore",
	)

	supabase_url: Optional[str] = Field(None, description="Managed database REST endpoint")
	supabase_service_role_key: Optional[str] = Field(None, description="Database service credential")
	openai_api_key: Optional[str] = Field(None, description="Model provider credential")
	netlify_auth_token: Optional[str] = Field(None, description="Hosting platform credential")
	netlify_site_id: Optional[str] = Field(None, description="Hosting platform site identifier")
	weather_api_key: Optional[str] = Field(None, description="Weather provider credential")
	fine_tuned_model_name: Optional[str] = Field(
		None, description="Currently published model identifier"
	)

	base_model: str = Field(DEFAULT_BASE_MODEL, min_length=1)
	feedback_table: str = Field("feedback", min_length=1)
	min_rating: int = Field(6, ge=1, le=7)
	dataset_path: Path = Field(Path("training-data.jsonl"))

	log_level: str = Field("INFO", description="Default logging level")
	logs_dir: Path = Field(Path("logs"), description="Directory for log files")

	polling: PollingPolicy = PollingPolicy()
	report: ReportSettings = ReportSettings()

	def model_post_init(self, __context: object) -> None:
		self.logs_dir.mkdir(parents=True, exist_ok=True)

	def missing(self, *names: str) -> List[str]:
		return [name for name in names if not getattr(self, name)]

	def require(self, *names: str) -> None:
		"""
		Raise ConfigurationMissingError listing every absent value.
		"""

		absent = self.missing(*names)
		if absent:
			raise ConfigurationMissingError(
				"Missing required configuration: " + ", ".join(name.upper() for name in absent)
			)


PIPELINE_REQUIRED = ("supabase_url", "supabase_service_role_key", "openai_api_key")
PUBLISH_REQUIRED = ("netlify_auth_token", "netlify_site_id")
