"""
Run the JSON-RPC tool server over stdin/stdout.

Example:
    echo '{"jsonrpc": "2.0", "id": 1, "method": "tools/list"}' | python -m scripts.stdio_server
"""

from __future__ import annotations

import asyncio
import logging
import sys

from docvec.api.handlers import RpcDispatcher
from docvec.api.stdio import serve_stdio
from docvec.config import setup_logging
from docvec.errors import VectorIndexError
from docvec.indexing.pipeline import DocumentPipeline
from docvec.registry import ServiceRegistry


async def run() -> None:
    async with ServiceRegistry() as registry:
        await serve_stdio(RpcDispatcher(DocumentPipeline(registry)))


def main() -> None:
    setup_logging()
    logger = logging.getLogger(__name__)
    try:
        asyncio.run(run())
    except VectorIndexError as exc:
        logger.error("Stdio server failed to start: %s", exc.message, extra={"kind": exc.kind.value})
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down stdio server")


if __name__ == "__main__":
    main()
