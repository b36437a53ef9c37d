"""
Tests for the line-delimited stdio transport.
"""

import io
import json

import pytest

from docvec.api.handlers import RpcDispatcher
from docvec.api.stdio import process_line, serve_stdio


@pytest.fixture
def dispatcher(pipeline) -> RpcDispatcher:
    return RpcDispatcher(pipeline)


async def test_serves_one_response_per_request_line(dispatcher) -> None:
    stdin = io.StringIO(
        json.dumps({"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
        + "\n\n"
        + json.dumps(
            {
                "jsonrpc": "2.0",
                "id": 2,
                "method": "tools/call",
                "params": {"name": "insert_document", "arguments": {"text": "Over stdio."}},
            }
        )
        + "\n"
    )
    stdout = io.StringIO()

    handled = await serve_stdio(dispatcher, stdin=stdin, stdout=stdout)

    lines = stdout.getvalue().splitlines()
    assert handled == 2
    assert [json.loads(line)["id"] for line in lines] == [1, 2]
    assert json.loads(lines[1])["result"]["chunk_count"] == 1


async def test_invalid_json_line_is_parse_error(dispatcher) -> None:
    response = await process_line(dispatcher, "{not json")

    assert response.error.code == "PARSE_ERROR"
    assert response.to_wire()["id"] is None


async def test_empty_input_ends_immediately(dispatcher) -> None:
    stdout = io.StringIO()

    assert await serve_stdio(dispatcher, stdin=io.StringIO(""), stdout=stdout) == 0
    assert stdout.getvalue() == ""
