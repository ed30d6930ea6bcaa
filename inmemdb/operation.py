from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

# Grammar keywords
SET = "SET"
GET = "GET"
QPUSH = "QPUSH"
QPOP = "QPOP"
EX = "EX"


class Condition(str, Enum):
    NX = "NX"  # only if absent
    XX = "XX"  # only if present


class Cmd(str, Enum):
    """Canonical names used to look up store handlers."""

    SET = "Set"
    GET = "Get"
    QPUSH = "QPush"
    QPOP = "QPop"


DEFAULT_COMMANDS: Mapping[str, Cmd] = MappingProxyType({
    SET: Cmd.SET,
    GET: Cmd.GET,
    QPUSH: Cmd.QPUSH,
    QPOP: Cmd.QPOP,
})

DEFAULT_CONDITIONS: Mapping[str, Tuple[Condition, ...]] = MappingProxyType({
    SET: (Condition.NX, Condition.XX),
    QPUSH: (),
    QPOP: (),
})


@dataclass(frozen=True)
class Operation:
    """One validated command, as produced by the parser.

    ``value``, ``expiry`` and ``condition`` are only ever set for SET;
    ``queue_values`` is only non-empty for QPUSH.
    """

    cmd: Cmd
    key: str
    query_string: str
    value: Optional[str] = None
    expiry: Optional[int] = None
    condition: Optional[Condition] = None
    queue_values: Tuple[str, ...] = ()
