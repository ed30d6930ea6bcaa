import argparse
import asyncio
import logging
import sys
from dataclasses import replace

from inmemdb.config import load_config
from inmemdb.errors import EngineError
from inmemdb.logging_config import setup_logging
from inmemdb.router import Dispatcher, start_in_memory_db

logger = logging.getLogger(__name__)


def format_reply(result=None, error=None):
    if error is not None:
        return f"-ERR {error}\r\n"
    if result is None:
        return "+OK\r\n"
    return f"${result}\r\n"


async def handle_client(reader, writer, dispatcher: Dispatcher):
    peer = writer.get_extra_info("peername")
    logger.debug("Client connected: %s", peer)
    try:
        while True:
            line = await reader.readline()
            if not line:
                break
            command_string = line.decode("utf-8", errors="replace").rstrip("\r\n")
            try:
                result = await dispatcher.command(command_string)
                resp = format_reply(result)
            except EngineError as e:
                resp = format_reply(error=e)
            writer.write(resp.encode())
            await writer.drain()
    finally:
        writer.close()
        await writer.wait_closed()
        logger.debug("Client disconnected: %s", peer)


async def serve(dispatcher: Dispatcher, host: str, port: int):
    return await asyncio.start_server(
        lambda r, w: handle_client(r, w, dispatcher),
        host,
        port,
    )


def build_parser():
    parser = argparse.ArgumentParser(description="In-memory key/value and queue server")
    parser.add_argument("--host", type=str, default="localhost", help="Interface to listen on")
    parser.add_argument("--port", type=int, default=7379, help="Port to run the server on")
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-command deadline in seconds (overrides INMEMDB_COMMAND_TIMEOUT)",
    )
    parser.add_argument("--log-level", type=str, default=None, help="Log level (overrides INMEMDB_LOG_LEVEL)")
    return parser


async def main(argv=None):
    args = build_parser().parse_args(argv)
    config = load_config()
    if args.timeout is not None:
        config = replace(config, command_timeout=args.timeout)
    if args.log_level:
        config = replace(config, log_level=args.log_level.upper())
    setup_logging(config.log_level)

    dispatcher = start_in_memory_db(config)
    server = await serve(dispatcher, args.host, args.port)
    logger.info("Starting server on %s:%d", args.host, args.port)

    async with server:
        await server.serve_forever()


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    run()
