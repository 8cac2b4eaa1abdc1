from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    llm_base_url: str = "http://localhost:11434/v1"
    llm_model: str = "qwen2.5:7b"
    llm_max_tokens: int = 1024
    llm_temperature: float = 0.1
    llm_timeout: float = 120.0

    # Seconds between scrolling to a page and highlighting on it
    scroll_settle_delay: float = 0.3

    max_upload_mb: int = 50

    chainlit_host: str = "0.0.0.0"
    chainlit_port: int = 8000

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
