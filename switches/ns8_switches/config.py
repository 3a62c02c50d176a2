"""Configuration for NS8 Protect switches."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Magento service integration
    magento_integration_type: str = "MAGENTO"
    rest_path: str = "/index.php/rest"

    # Retry Parameters
    max_retry: int = 5  # Additional attempts after the first 404
    wait_ms: int = 2000  # Delay between attempts
    backoff_multiplier: float = 1.0  # 1.0 keeps the delay fixed
    max_wait_ms: int = 60000

    # Transport
    request_timeout: float = 30.0  # Seconds
    signature_method: str = "HMAC-SHA256"

    # Error reporting
    error_queue_size: int = 1000

    class Config:
        env_prefix = "NS8_"
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
