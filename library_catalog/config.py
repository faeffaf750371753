import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class Settings:
    # Application
    app_name: str = os.getenv("APP_NAME", "Library Catalog")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    debug: bool = _env_flag("DEBUG", "False")

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "WARNING").upper()

    # CLI
    cli_output: str = os.getenv("LIB_CLI_OUTPUT", "plain")
    preload_sample_data: bool = _env_flag("PRELOAD_SAMPLE_DATA", "True")


settings = Settings()
