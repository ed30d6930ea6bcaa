from __future__ import annotations

import re
from typing import List, Mapping, Optional, Tuple

from inmemdb.errors import MalformedArgument
from inmemdb.operation import (
    DEFAULT_COMMANDS,
    DEFAULT_CONDITIONS,
    EX,
    Cmd,
    Condition,
    Operation,
)

# SET key value [EX seconds] [NX|XX]
SET_MIN_TOKENS = 3
SET_MAX_TOKENS = 6

MAX_EXPIRY = 2**63 - 1

# Integer literal with an optional sign, base taken from the prefix: 0x, 0b,
# 0o or a bare leading 0 (octal). Underscores only between digits.
_INT_LITERAL = re.compile(
    r"(?P<sign>[+-]?)(?:"
    r"0[xX](?P<hex>(?:_?[0-9a-fA-F])+)"
    r"|0[bB](?P<bin>(?:_?[01])+)"
    r"|0[oO](?P<oct>(?:_?[0-7])+)"
    r"|(?P<zoct>0(?:_?[0-7])*)"
    r"|(?P<dec>[1-9](?:_?[0-9])*)"
    r")"
)
_BASES = (("hex", 16), ("bin", 2), ("oct", 8), ("zoct", 8), ("dec", 10))


def parse_expiry(token: str) -> int:
    """Parse the seconds argument of ``EX``.

    ASCII only: ``0x10`` is 16 seconds, ``010`` is 8, and values beyond
    a signed 64-bit integer are rejected.
    """
    m = _INT_LITERAL.fullmatch(token)
    if m is None:
        raise MalformedArgument(f"expiry is not an integer: {token!r}")

    for group, base in _BASES:
        digits = m.group(group)
        if digits is not None:
            digits = digits.replace("_", "").lstrip("0") or "0"
            if len(digits) > 64:
                raise MalformedArgument(f"expiry out of range: {token!r}")
            expiry = int(digits, base)
            break
    if m.group("sign") == "-" and expiry != 0:
        raise MalformedArgument(f"expiry must be non-negative: {token!r}")
    if expiry > MAX_EXPIRY:
        raise MalformedArgument(f"expiry out of range: {token!r}")
    return expiry


class CommandParser:
    """Turns one command line into an :class:`Operation`.

    ``parse()`` never raises. Afterwards check ``err()`` first, then
    ``is_valid()``; only a valid parser has a usable ``operation``.
    """

    def __init__(
        self,
        command_string: str,
        commands: Mapping[str, Cmd] = DEFAULT_COMMANDS,
        conditions: Mapping[str, Tuple[Condition, ...]] = DEFAULT_CONDITIONS,
    ):
        self.command_string = command_string
        self.operation: Optional[Operation] = None
        self.error: Optional[MalformedArgument] = None
        self._commands = commands
        self._conditions = conditions
        self._valid = False

    def parse(self) -> None:
        if self.command_string == "":
            return

        tokens = self.command_string.split(" ")
        keyword = tokens[0]
        cmd = self._commands.get(keyword)
        if cmd is None:
            return
        if len(tokens) > 1 and tokens[1] == "":
            return

        try:
            if cmd is Cmd.SET:
                self.operation = self._parse_set(keyword, tokens)
            elif cmd is Cmd.GET:
                self.operation = self._parse_key_only(cmd, tokens)
            elif cmd is Cmd.QPUSH:
                self.operation = self._parse_qpush(tokens)
            elif cmd is Cmd.QPOP:
                self.operation = self._parse_key_only(cmd, tokens)
        except MalformedArgument as e:
            self.error = e
            self.operation = None
            return

        self._valid = self.operation is not None

    def is_valid(self) -> bool:
        return self._valid

    def err(self) -> Optional[MalformedArgument]:
        return self.error

    def _parse_set(self, keyword: str, tokens: List[str]) -> Optional[Operation]:
        n = len(tokens)
        if n < SET_MIN_TOKENS or n > SET_MAX_TOKENS:
            return None

        expiry: Optional[int] = None
        condition: Optional[Condition] = None
        allowed = self._conditions.get(keyword, ())

        for i in range(3, n):
            token = tokens[i]
            if i == 4:
                # EX must come before the condition
                if condition is not None:
                    return None
                if tokens[i - 1] != EX:
                    return None
                expiry = parse_expiry(token)
            elif i == n - 1 and n in (4, 6):
                if token not in allowed:
                    return None
                condition = Condition(token)
            elif i == 3 and token == EX:
                continue
            else:
                return None

        return Operation(
            cmd=Cmd.SET,
            key=tokens[1],
            value=tokens[2],
            expiry=expiry,
            condition=condition,
            query_string=self.command_string,
        )

    def _parse_key_only(self, cmd: Cmd, tokens: List[str]) -> Optional[Operation]:
        if len(tokens) != 2:
            return None
        return Operation(cmd=cmd, key=tokens[1], query_string=self.command_string)

    def _parse_qpush(self, tokens: List[str]) -> Optional[Operation]:
        if len(tokens) < 3:
            return None
        return Operation(
            cmd=Cmd.QPUSH,
            key=tokens[1],
            queue_values=tuple(tokens[2:]),
            query_string=self.command_string,
        )
