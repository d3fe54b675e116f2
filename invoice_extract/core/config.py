from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    app_name: str = Field("invoice-extract", alias="APP_NAME")
    app_env: str = Field("dev", alias="APP_ENV")

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # LLM (OpenAI-compatible chat completions API)
    llm_base_url: str | None = Field(default=None, alias="LLM_BASE_URL")
    llm_api_key: str | None = Field(default=None, alias="LLM_API_KEY")
    llm_deployment: str = Field("gpt-4o-mini", alias="LLM_DEPLOYMENT")
    llm_temperature: float = Field(0.0, alias="LLM_TEMPERATURE")

    # Azure Document Intelligence (optional text backend, pdfplumber otherwise)
    az_di_endpoint: str | None = Field(default=None, alias="AZ_DI_ENDPOINT")
    az_di_api_key: str | None = Field(default=None, alias="AZ_DI_API_KEY")

    # Extraction pipeline
    extraction_mode: str = Field("single", alias="EXTRACTION_MODE")  # "single" or "multi"
    max_upload_bytes: int = Field(10 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")
    min_text_length: int = Field(10, alias="MIN_TEXT_LENGTH")
    request_timeout_seconds: float = Field(60.0, alias="REQUEST_TIMEOUT_SECONDS")

    # Storage
    invoice_db_path: str = Field("invoices.db", alias="INVOICE_DB_PATH")

    # CORS (comma-separated lists)
    cors_origins: str = Field("*", alias="CORS_ORIGINS")
    cors_methods: str = Field("POST,OPTIONS", alias="CORS_METHODS")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() in ("prod", "production")

settings = Settings()
