from __future__ import annotations

import logging
import os
from dataclasses import dataclass

DEFAULT_EXTENSION = ".linebased"


@dataclass
class ExpandConfig:
    # Suffix appended to every include path. Empty disables both the append
    # and the check that rejects paths already carrying it.
    extension: str = DEFAULT_EXTENSION
    # Display prefix for file names in locations; never used to open files.
    root: str = ""
    log_level: str = "WARNING"

    @staticmethod
    def normalize_extension(raw: str | None) -> str:
        ext = (raw or "").strip()
        if ext.lower() in {"", "none", "off"}:
            return ""
        if not ext.startswith("."):
            ext = "." + ext
        return ext

    @staticmethod
    def normalize_log_level(raw: str | None) -> str:
        level = (raw or "").strip().upper()
        if level in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            return level
        return "WARNING"

    @classmethod
    def from_env(cls) -> ExpandConfig:
        ext_raw = os.environ.get("LINEBASED_EXTENSION")
        extension = DEFAULT_EXTENSION if ext_raw is None else cls.normalize_extension(ext_raw)
        root = os.environ.get("LINEBASED_ROOT", "").strip()
        log_level = cls.normalize_log_level(os.environ.get("LINEBASED_LOG_LEVEL"))
        return cls(extension=extension, root=root, log_level=log_level)

    @property
    def level(self) -> int:
        return logging.getLevelName(self.normalize_log_level(self.log_level))
