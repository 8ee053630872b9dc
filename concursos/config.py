"""
Runtime settings read from environment variables (after load_env()).
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .normalize import NORMALIZERS

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    db_path: Path = Path("data/concursos.db")
    log_level: str = "INFO"
    log_dir: Optional[Path] = None
    profession_match: str = "exact"
    retries: int = 0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from CONCURSOS_* variables.

        Raises:
            ValueError: a variable holds an unsupported value
        """
        env = os.environ if environ is None else environ

        log_level = env.get("CONCURSOS_LOG_LEVEL", cls.log_level).strip().upper()
        if log_level not in LOG_LEVELS:
            raise ValueError(f"CONCURSOS_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got '{log_level}'")

        match_mode = env.get("CONCURSOS_PROFESSION_MATCH", cls.profession_match).strip().lower()
        if match_mode not in NORMALIZERS:
            raise ValueError(
                f"CONCURSOS_PROFESSION_MATCH must be one of {', '.join(sorted(NORMALIZERS))}, got '{match_mode}'"
            )

        raw_retries = env.get("CONCURSOS_RETRIES", str(cls.retries)).strip()
        try:
            retries = int(raw_retries)
        except ValueError:
            raise ValueError(f"CONCURSOS_RETRIES must be an integer, got '{raw_retries}'") from None
        if retries < 0:
            raise ValueError("CONCURSOS_RETRIES must be >= 0")

        log_dir = env.get("CONCURSOS_LOG_DIR", "").strip()

        return cls(
            db_path=Path(env.get("CONCURSOS_DB_PATH", str(cls.db_path))),
            log_level=log_level,
            log_dir=Path(log_dir) if log_dir else None,
            profession_match=match_mode,
            retries=retries,
        )
