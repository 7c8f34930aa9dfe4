"""Process level configuration (which search worker to run). Game settings live in src/api/models.py"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from src.core.exceptions import ConfigurationError

UCI_ENGINE_ENV = "CHESS_UCI_ENGINE"
SEARCH_PROCESSES_ENV = "CHESS_SEARCH_PROCESSES"


class EngineConfig(BaseModel):
    """
    How to search for computer moves.
    ---

    * uci_engine_path: path to a UCI engine binary (e.g. stockfish). If not set, the built-in negamax search is used.
    * search_processes: > 0 runs the built-in search in a process pool instead of a single worker thread.
    """

    uci_engine_path: Optional[str] = None
    search_processes: int = Field(default=0, ge=0)


def load_engine_config(environ: Optional[Mapping[str, str]] = None) -> EngineConfig:
    """Read the EngineConfig from environment variables. Absent variables keep the defaults."""
    environ = os.environ if environ is None else environ

    raw: dict[str, str] = {}
    if environ.get(UCI_ENGINE_ENV):
        raw["uci_engine_path"] = environ[UCI_ENGINE_ENV]
    if environ.get(SEARCH_PROCESSES_ENV):
        raw["search_processes"] = environ[SEARCH_PROCESSES_ENV]

    try:
        return EngineConfig(**raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid engine configuration: {e}") from e
