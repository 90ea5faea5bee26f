from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/solfege.db"
    redis_url: str = "redis://redis:6379/0"
    data_dir: str = "./data"
    frontend_origin: str = "http://localhost:3000"
    max_upload_mb: int = 5
    ingest_async: bool = False
    match_skip_invalid_keys: bool = True
    proxy_upstream_url: str = "https://api.openai.com"
    proxy_timeout_sec: int = 30
    ingest_queue: str = "ingest"

    class Config:
        env_file = ".env"


settings = Settings()
