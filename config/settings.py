"""
Configuration management using Pydantic Settings.

Environment variables:
- VLLM_API_KEY: API key for the vLLM server hosting the vision OCR model
- VLLM_SERVER_URL: Base URL for vLLM server
- VLLM_MODEL: Served model name
- OCR_CONFIDENCE_THRESHOLD: Primary engine confidence needed to skip fallback
- OCR_PREFERRED_ENGINE: "primary" or "fallback"
- TESSERACT_LANG / TESSERACT_PSM: Fallback engine options
- LOG_LEVEL: Logging level for the CLI and API entry points
"""
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # vLLM Configuration
    vllm_api_key: str = Field(default="123", env="VLLM_API_KEY")
    vllm_server_url: str = Field(
        default="http://localhost:8000/v1",
        env="VLLM_SERVER_URL"
    )
    vllm_model: str = Field(default="ocr", env="VLLM_MODEL")

    # OCR Parameters
    ocr_max_tokens: int = Field(default=512, env="OCR_MAX_TOKENS")
    ocr_temperature: float = Field(default=0.0, env="OCR_TEMPERATURE")
    ocr_max_image_size: int = Field(default=2048, env="OCR_MAX_IMAGE_SIZE")
    ocr_confidence_threshold: float = Field(default=0.7, env="OCR_CONFIDENCE_THRESHOLD")
    ocr_preferred_engine: str = Field(default="primary", env="OCR_PREFERRED_ENGINE")

    # Tesseract fallback
    tesseract_lang: str = Field(default="eng", env="TESSERACT_LANG")
    tesseract_psm: int = Field(default=7, env="TESSERACT_PSM")

    # Evaluation
    arithmetic_precision: int = Field(default=2, env="ARITHMETIC_PRECISION")
    formula_precision: int = Field(default=6, env="FORMULA_PRECISION")

    # API Configuration
    api_host: str = Field(default="0.0.0.0", env="API_HOST")
    api_port: int = Field(default=8002, env="API_PORT")

    log_level: str = Field(default="INFO", env="LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    def get_ocr_params(self) -> dict:
        """Get vision OCR request parameters as dictionary."""
        return {
            'max_tokens': self.ocr_max_tokens,
            'temperature': self.ocr_temperature,
            'max_image_size': self.ocr_max_image_size,
        }


# Global settings instance
settings = Settings()
