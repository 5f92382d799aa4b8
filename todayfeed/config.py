from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    sources_url: str = "https://pcdn.brave.software/brave-today/sources.json"
    feed_url: str = "https://pcdn.brave.software/brave-today/feed.json"
    request_timeout: float = 30.0

    # sqlite file holding browsing history; empty disables personalization
    history_path: str = ""
    history_limit: int = 200
    visited_domain_penalty: float = 5.0

    # Publisher whose items fill the "Deals" cards
    deals_publisher_id: str = "brave_offers"

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "TODAYFEED_"}


settings = Settings()
