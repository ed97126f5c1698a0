from __future__ import annotations

import sys
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class StencilSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STENCIL_", case_sensitive=False)

    config_file: Path = Path("stencil.yaml")
    file_mode: int = 0o644
    python_executable: str = sys.executable
    verbose: bool = False
