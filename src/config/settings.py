"""
Application Settings.

Centraliza toda configuração via .env / variáveis de ambiente.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Configurações carregadas de variáveis de ambiente."""

    # --- App ---
    debug: bool = False
    log_level: str = "INFO"

    # --- API de análise ---
    api_base_url: str = "https://detectabb-backend-3.onrender.com"
    request_timeout_s: float = 60.0

    # --- Polling ---
    poll_max_attempts: int = 30        # 30 x 2s = 1 minuto
    poll_interval_ms: int = 2000

    # --- Upload ---
    max_upload_bytes: int = 10 * 1024 * 1024

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def effective_log_level(self) -> str:
        """DEBUG=true força nível DEBUG; senão vale LOG_LEVEL."""
        return "DEBUG" if self.debug else self.log_level.upper()


@lru_cache
def get_settings() -> Settings:
    """Singleton de settings."""
    return Settings()
