from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Firecrawl (search + scrape)
    firecrawl_api_key: str = ""  # requests may supply their own key instead
    firecrawl_base_url: str = "https://api.firecrawl.dev"
    search_timeout_seconds: float = 60.0

    # OpenAI
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"

    # DeepSeek (OpenAI-compatible)
    deepseek_api_key: str = ""
    deepseek_base_url: str = "https://api.deepseek.com/v1"
    deepseek_model: str = "deepseek-chat"

    # Generation
    follow_up_model: str = "gpt-4o-mini"  # always served by OpenAI
    answer_temperature: float = 0.7
    answer_max_tokens: int = 2000
    follow_up_temperature: float = 0.7
    follow_up_max_tokens: int = 150

    # Cosmetic pacing for the client, 0 disables
    sources_render_delay_ms: int = 300
    typing_delay_ms: int = 30

    # App
    cors_origins: str = "http://localhost:3000"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"
    log_dir: str = "logs"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]


settings = Settings()
