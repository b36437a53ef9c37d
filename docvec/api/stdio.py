"""
Line-delimited JSON-RPC over stdin/stdout.

One request per input line, one response per output line. Logs go to
stderr so stdout only ever carries protocol frames.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import IO

from docvec.api.handlers import RpcDispatcher
from docvec.models.schemas import RpcError, RpcResponse

logger = logging.getLogger(__name__)


def _write(stream: IO[str], response: RpcResponse) -> None:
    stream.write(json.dumps(response.to_wire(), ensure_ascii=False) + "\n")
    stream.flush()


async def process_line(dispatcher: RpcDispatcher, line: str) -> RpcResponse:
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse stdio line", extra={"error": str(exc)})
        return RpcResponse(id=None, error=RpcError(code="PARSE_ERROR", message="Invalid JSON"))
    return await dispatcher.handle(payload)


async def serve_stdio(
    dispatcher: RpcDispatcher,
    stdin: IO[str] | None = None,
    stdout: IO[str] | None = None,
) -> int:
    """Serve until EOF; returns the number of requests answered."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    handled = 0

    logger.info("Stdio server ready, waiting for requests")
    while True:
        line = await asyncio.to_thread(stdin.readline)
        if not line:
            break
        line = line.strip()
        if not line:
            continue
        response = await process_line(dispatcher, line)
        _write(stdout, response)
        handled += 1

    logger.info("Stdin ended, shutting down stdio server", extra={"handled": handled})
    return handled


__all__ = ["serve_stdio", "process_line"]
