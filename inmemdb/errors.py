from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EngineError(Exception):
    code: str
    message: str

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class MalformedArgument(EngineError):
    def __init__(self, message: str) -> None:
        super().__init__("MALFORMED_ARGUMENT", message)


class InvalidCommand(EngineError):
    def __init__(self, message: str = "invalid command") -> None:
        super().__init__("INVALID_COMMAND", message)


class KeyNotFound(EngineError):
    def __init__(self, message: str = "key not found") -> None:
        super().__init__("KEY_NOT_FOUND", message)


class QueueEmpty(EngineError):
    def __init__(self, message: str = "queue is empty or not found") -> None:
        super().__init__("QUEUE_EMPTY", message)


class Timeout(EngineError):
    def __init__(self, message: str = "query timed out") -> None:
        super().__init__("TIMEOUT", message)


class InternalError(EngineError):
    def __init__(self, message: str) -> None:
        super().__init__("INTERNAL", message)
