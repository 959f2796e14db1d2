"""Configuración de la aplicación, cargada desde variables de entorno o `.env`."""

import tempfile

from pydantic_settings import BaseSettings

MASK_BLUR_SIGMA: float = 15.0  # pixels


class Settings(BaseSettings):
    inpaint_api_url: str = ""
    inpaint_api_key: str = ""
    inpaint_timeout: float = 120.0  # seconds

    cfg_scale: float = 8.0
    steps: int = 50
    style_preset: str = "photographic"

    temp_mask_dir: str = tempfile.gettempdir()
    log_level: str = "info"

    # In production, replace with the frontend's domain
    cors_origins: list[str] = ["*"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
