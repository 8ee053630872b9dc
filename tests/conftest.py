"""
Pytest configuration and shared fixtures.
"""

import pytest
from pathlib import Path
from typing import Dict, Any

from concursos.database import init_database
from concursos.directory import CandidateDirectory, ContestDirectory
from concursos.logger import StructuredLogger, reset_logger
from concursos.matching import MatchingEngine
from concursos.store import Store


@pytest.fixture(autouse=True)
def _fresh_logger():
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def logger() -> StructuredLogger:
    """Quiet logger with metrics, no handlers writing anywhere."""
    return StructuredLogger(name="concursos-test", enable_console=False, enable_file=False)


@pytest.fixture
def db_path(tmp_path) -> Path:
    """Initialized temporary database."""
    path = tmp_path / "test.db"
    init_database(path)
    return path


@pytest.fixture
def store(db_path):
    s = Store(db_path)
    yield s
    s.dispose()


@pytest.fixture
def candidates(store, logger) -> CandidateDirectory:
    return CandidateDirectory(store, logger=logger)


@pytest.fixture
def contests(store, logger) -> ContestDirectory:
    return ContestDirectory(store, logger=logger)


@pytest.fixture
def engine(store, logger) -> MatchingEngine:
    return MatchingEngine(store, logger=logger)


@pytest.fixture
def valid_candidate() -> Dict[str, Any]:
    """Valid candidate payload."""
    return {
        "name": "Lindsey Craft",
        "cpf": "182.845.084-34",
        "professions": ["Engenheiro", "Professor"],
    }


@pytest.fixture
def valid_contest() -> Dict[str, Any]:
    """Valid contest payload."""
    return {
        "agency": "SEDU",
        "edital": "9/2016",
        "code": "61828450843",
        "positions": [
            {"profession": "Professor", "vacancies": 3},
            {"profession": "Analista de Sistemas", "vacancies": 1},
        ],
    }
