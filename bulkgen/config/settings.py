from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    files_root: str = "/app/projects"
    output_dir_name: str = "processed"

    generation_provider: str = "openai"
    generation_temperature: float = 0.1
    generation_system_prompt: str = (
        "You are an expert software engineer who provides detailed analysis "
        "and improvements."
    )

    generation_openai_api_key: str = ""
    generation_openai_model_name: str = "gpt-4"

    generation_openai_compatible_base_url: str = ""
    generation_openai_compatible_api_key: str = ""
    generation_openai_compatible_model_name: str = ""

    generation_openrouter_api_key: str = ""
    generation_openrouter_model_name: str = ""
    generation_groq_api_key: str = ""
    generation_groq_model_name: str = ""
    generation_together_api_key: str = ""
    generation_together_model_name: str = ""
    generation_deepseek_api_key: str = ""
    generation_deepseek_model_name: str = ""
    generation_ollama_api_key: str = ""
    generation_ollama_model_name: str = ""

    generation_timeout_seconds: float = 30.0
    file_read_timeout_seconds: float = 30.0
    inter_file_delay_seconds: float = 0.0

    job_retention_hours: int = 24
    reaper_interval_seconds: int = 300
