from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from inmemdb.operation import DEFAULT_COMMANDS, DEFAULT_CONDITIONS, Cmd, Condition


@dataclass(frozen=True)
class EngineConfig:
    commands: Mapping[str, Cmd] = field(default_factory=lambda: DEFAULT_COMMANDS)
    conditions: Mapping[str, Tuple[Condition, ...]] = field(default_factory=lambda: DEFAULT_CONDITIONS)
    command_timeout: Optional[float] = None  # seconds; None waits forever
    handler_delay: float = 0.0  # seconds spent inside the SET write path
    log_level: str = "INFO"


def _optional_float(raw: Optional[str]) -> Optional[float]:
    if raw is None or not raw.strip():
        return None
    return float(raw)


def load_config(environ: Mapping[str, str] = os.environ) -> EngineConfig:
    timeout = _optional_float(environ.get("INMEMDB_COMMAND_TIMEOUT"))
    delay = _optional_float(environ.get("INMEMDB_HANDLER_DELAY"))
    if timeout is not None and timeout <= 0:
        raise ValueError("INMEMDB_COMMAND_TIMEOUT must be positive")
    if delay is not None and delay < 0:
        raise ValueError("INMEMDB_HANDLER_DELAY must be non-negative")

    return EngineConfig(
        command_timeout=timeout,
        handler_delay=delay or 0.0,
        log_level=str(environ.get("INMEMDB_LOG_LEVEL") or "INFO").upper(),
    )
