# buildtask/shared/config.py
import os
from enum import Enum
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class LogFormat(str, Enum):
    CONSOLE = "console"
    JSON = "json"


class Settings(BaseSettings):
    """
    Central Configuration Registry.
    Strictly typed and validated via Pydantic.

    Every field can be overridden with a BUILDTASK_-prefixed environment
    variable (e.g. BUILDTASK_COMPILER_BIN=mcs) or a local .env file.
    """

    # --- Toolchain ---
    # Source language used when a compilation unit does not name one.
    DEFAULT_LANGUAGE: str = "csharp"

    # Force a compiler binary instead of the language's default (csc/vbc/vjc).
    COMPILER_BIN: Optional[str] = None
    RESGEN_BIN: str = "resgen"
    LINKER_BIN: str = "al"
    TOOL_TIMEOUT_SEC: Optional[int] = None

    # Platform directory holding system libraries (e.g. the framework
    # assembly directory). Bare reference names are looked up here.
    SYSTEM_LIBRARY_DIR: Optional[str] = None

    # --- Resources ---
    DEFINITION_EXTENSIONS: List[str] = [".resx"]
    INTERMEDIATE_EXTENSION: str = ".resources"
    SATELLITE_EXTENSION: str = "dll"

    # Locale names accepted in addition to the packaged culture catalogue.
    EXTRA_CULTURES: List[str] = []

    # --- Response file ---
    # Defaults to the platform temp directory when unset.
    TEMP_DIR: Optional[str] = None

    # --- Logging & Observability ---
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: LogFormat = LogFormat.CONSOLE

    @property
    def temp_dir(self) -> Optional[str]:
        if self.TEMP_DIR:
            return os.path.abspath(self.TEMP_DIR)
        return None

    def is_definition_file(self, path: str) -> bool:
        ext = os.path.splitext(path)[1].lower()
        return ext in {e.lower() for e in self.DEFINITION_EXTENSIONS}

    model_config = SettingsConfigDict(env_prefix="BUILDTASK_", env_file=".env", extra="ignore")


settings = Settings()
