import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    catalog_file: str = "data/catalog/sample_catalog.json"
    log_level: str = "INFO"

    brute_force_threshold: int = 40
    prune_safety_margin: float = 0.01
    default_strategy_limit: int = 3
    max_strategy_limit: int = 20
    strategies_require_premium: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
