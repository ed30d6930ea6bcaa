import asyncio
import logging
import time
from typing import Callable, Optional

from inmemdb.command_parser import CommandParser
from inmemdb.config import EngineConfig
from inmemdb.database import InMemoryDb
from inmemdb.errors import EngineError, InternalError, InvalidCommand, Timeout
from inmemdb.registry import build_registry

logger = logging.getLogger(__name__)

_UNSET = object()


class Dispatcher:
    """Parse, look up, execute and log one command at a time."""

    def __init__(self, db: InMemoryDb, config: Optional[EngineConfig] = None):
        self.db = db
        self.config = config or EngineConfig()
        self._handlers = build_registry(db)

    def parse(self, command_string: str) -> CommandParser:
        parser = CommandParser(
            command_string,
            commands=self.config.commands,
            conditions=self.config.conditions,
        )
        parser.parse()
        return parser

    async def command(self, command_string: str, timeout=_UNSET) -> Optional[str]:
        """Run one command line and return its value, if any.

        ``timeout`` is in seconds; when omitted the configured
        ``command_timeout`` applies, and ``None`` means no deadline.
        """
        parser = self.parse(command_string)
        if parser.err() is not None:
            raise parser.err()
        if not parser.is_valid():
            raise InvalidCommand()

        query = parser.operation
        fn = self._handlers.get(query.cmd)
        if fn is None:
            raise InvalidCommand(f"no handler for command {query.cmd.value}")

        if timeout is _UNSET:
            timeout = self.config.command_timeout

        try:
            db_response = await asyncio.wait_for(fn(query), timeout)
        except asyncio.TimeoutError:
            logger.info("[InMemoryDb] Query timed out: %s", command_string)
            raise Timeout(f"query exceeded {timeout}s deadline") from None
        except EngineError:
            raise
        except Exception as e:
            logger.exception("[InMemoryDb] Query failed: %s", command_string)
            raise InternalError(f"{type(e).__name__}: {e}") from e

        logger.info("[InMemoryDb] Query Executed %s", command_string)
        if db_response is not None:
            return db_response.value
        return None


def start_in_memory_db(config: Optional[EngineConfig] = None,
                       clock: Callable[[], float] = time.time) -> Dispatcher:
    logger.info("[InMemoryDb] Initiating startup...")
    config = config or EngineConfig()
    db = InMemoryDb(clock=clock, handler_delay=config.handler_delay)
    dispatcher = Dispatcher(db, config)
    logger.info("[InMemoryDb] started inmemory database")
    return dispatcher
