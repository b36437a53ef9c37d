from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Request, status
from fastapi.responses import JSONResponse

from docvec.api.handlers import RpcDispatcher, get_tools_manifest

router = APIRouter()
logger = logging.getLogger(__name__)


def get_dispatcher(request: Request) -> RpcDispatcher:
    return request.app.state.dispatcher


@router.get("/tools", summary="List available tools")
def list_tools() -> Dict[str, Any]:
    return get_tools_manifest()


@router.post("/rpc", summary="JSON-RPC 2.0 tool endpoint")
async def rpc(request: Request, payload: Any = Body(default=None)) -> JSONResponse:
    response = await get_dispatcher(request).handle(payload)
    status_code = status.HTTP_400_BAD_REQUEST if response.error else status.HTTP_200_OK
    return JSONResponse(status_code=status_code, content=response.to_wire())


__all__ = ["router", "get_dispatcher"]
