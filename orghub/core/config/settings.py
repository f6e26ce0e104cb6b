# (c) Copyright Datacraft, 2026
"""Application settings configuration."""
from pathlib import Path

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	db_url: str = "sqlite+aiosqlite:///./orghub.db"
	db_ssl: bool = False
	db_echo: bool = False
	create_tables_on_startup: bool = True
	log_config: Path | None = None
	api_prefix: str = ''

	# ABAC
	abac_bypass_roles: list[str] = Field(default_factory=lambda: ["owner"])
	abac_decision_log_enabled: bool = True
	abac_seed_defaults_on_create: bool = True

	# Remote user config
	remote_user_header: str = "X-Forwarded-User"
	remote_roles_header: str = "X-Forwarded-Roles"
	remote_email_header: str = "X-Forwarded-Email"
	org_header: str = "X-Org-ID"

	@computed_field
	@property
	def async_db_url(self) -> str:
		url = str(self.db_url)
		# Handle various PostgreSQL URL formats
		if "postgresql+psycopg://" in url:
			return url.replace("postgresql+psycopg://", "postgresql+asyncpg://", 1)
		elif url.startswith("postgresql://"):
			return url.replace("postgresql://", "postgresql+asyncpg://", 1)
		return url

	@computed_field
	@property
	def is_sqlite(self) -> bool:
		return self.async_db_url.startswith("sqlite")

	model_config = SettingsConfigDict(
		env_prefix='orghub_',
		env_file='.env',
		env_file_encoding='utf-8',
		extra='ignore',
	)


_settings: Settings | None = None


def get_settings() -> Settings:
	global _settings
	if _settings is None:
		_settings = Settings()
	return _settings
