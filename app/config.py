from pydantic_settings import BaseSettings

_CHROME_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    mongodb_url: str
    mongodb_database: str = "lead_crawler"
    log_level: str = "INFO"
    crawl_timeout: float = 10.0
    crawl_page_delay: float = 1.0
    crawl_max_pages: int = 0  # 0 = no cap
    crawl_user_agent: str = _CHROME_USER_AGENT
