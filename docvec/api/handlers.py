"""
JSON-RPC tool dispatcher shared by the HTTP and stdio transports.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List

from pydantic import BaseModel, ValidationError

from docvec.errors import ErrorKind, VectorIndexError
from docvec.indexing.pipeline import DocumentPipeline
from docvec.models.schemas import (
    CreateDatabaseRequest,
    DeleteDocumentRequest,
    FindSimilarDocumentsRequest,
    InsertDocumentRequest,
    RpcError,
    RpcRequest,
    RpcResponse,
)

logger = logging.getLogger(__name__)

ERROR_CODES: Dict[ErrorKind, str] = {
    ErrorKind.VALIDATION: "INVALID_PARAMS",
    ErrorKind.CONFIGURATION: "CONFIGURATION_ERROR",
    ErrorKind.BATCH_TOO_LARGE: "INVALID_PARAMS",
    ErrorKind.EMBEDDING_PROVIDER: "EMBEDDING_ERROR",
    ErrorKind.EMPTY_CHUNKS: "INVALID_PARAMS",
    ErrorKind.STORE_NOT_FOUND: "DATABASE_NOT_FOUND",
    ErrorKind.NOT_FOUND: "NOT_FOUND",
    ErrorKind.STORAGE: "DATABASE_ERROR",
}

TOOLS: List[Dict[str, Any]] = [
    {
        "name": "insert_document",
        "description": "Insert a document with text content and optional metadata. "
        "The text will be chunked and embedded automatically.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "text": {"type": "string", "description": "The text content to insert (max 100,000 characters)"},
                "metadata": {"type": "object", "description": "Optional metadata to associate with the document"},
            },
            "required": ["text"],
        },
    },
    {
        "name": "find_similar_documents",
        "description": "Find documents similar to the given text using vector similarity search.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "text": {"type": "string", "description": "The query text to find similar documents for"},
                "top_k": {"type": "number", "description": "Number of similar documents to return", "default": 10},
            },
            "required": ["text"],
        },
    },
    {
        "name": "delete_document",
        "description": "Delete a document and all its chunks by document ID.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "doc_id": {"type": "string", "description": "The document ID to delete"},
            },
            "required": ["doc_id"],
        },
    },
    {
        "name": "create_database",
        "description": "Create a named vector database. Succeeds if it already exists.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "db_name": {
                    "type": "string",
                    "description": "Letters, digits, underscores and hyphens only",
                },
            },
            "required": ["db_name"],
        },
    },
]


class RpcFault(Exception):
    """Protocol-level failure carrying a wire error code."""

    def __init__(self, code: str, message: str, data: Any = None) -> None:
        self.code = code
        self.message = message
        self.data = data
        super().__init__(message)


def get_tools_manifest() -> Dict[str, Any]:
    return {"tools": TOOLS}


def _error_details(exc: ValidationError) -> List[Dict[str, Any]]:
    return exc.errors(include_url=False, include_context=False, include_input=False)


def _request_id(payload: Any) -> str | int | None:
    value = payload.get("id") if isinstance(payload, dict) else None
    return value if isinstance(value, (str, int)) and not isinstance(value, bool) else None


class RpcDispatcher:
    def __init__(self, pipeline: DocumentPipeline) -> None:
        self.pipeline = pipeline
        self._tools: Dict[str, Callable[[Dict[str, Any]], Awaitable[BaseModel]]] = {
            "insert_document": self._insert_document,
            "find_similar_documents": self._find_similar_documents,
            "delete_document": self._delete_document,
            "create_database": self._create_database,
        }

    async def handle(self, payload: Any) -> RpcResponse:
        try:
            request = RpcRequest.model_validate(payload)
        except ValidationError as exc:
            fault = RpcFault("INVALID_REQUEST", "Invalid JSON-RPC 2.0 request", _error_details(exc))
            return self._error(_request_id(payload), fault)

        logger.info("Handling RPC request", extra={"method": request.method, "request_id": request.id})
        try:
            result = await self._dispatch(request)
        except RpcFault as fault:
            return self._error(request.id, fault)
        except VectorIndexError as exc:
            return self._error(request.id, RpcFault(ERROR_CODES[exc.kind], exc.message, {"kind": exc.kind.value}))

        logger.info("RPC request completed", extra={"method": request.method, "request_id": request.id})
        return RpcResponse(id=request.id, result=result)

    async def _dispatch(self, request: RpcRequest) -> Any:
        if request.method == "tools/list":
            return get_tools_manifest()
        if request.method == "tools/call":
            params = request.params or {}
            name = params.get("name")
            if not name:
                raise RpcFault("INVALID_REQUEST", "Tool name is required")
            tool = self._tools.get(name)
            if tool is None:
                raise RpcFault("TOOL_NOT_FOUND", f"Unknown tool: {name}")
            result = await tool(params.get("arguments") or {})
            return result.model_dump()
        raise RpcFault("METHOD_NOT_FOUND", f"Unknown method: {request.method}")

    @staticmethod
    def _parse(model: type[BaseModel], arguments: Dict[str, Any]) -> Any:
        try:
            return model.model_validate(arguments)
        except ValidationError as exc:
            raise RpcFault("INVALID_PARAMS", "Invalid tool arguments", _error_details(exc)) from exc

    async def _insert_document(self, arguments: Dict[str, Any]) -> BaseModel:
        args = self._parse(InsertDocumentRequest, arguments)
        return await self.pipeline.insert(args.text, metadata=args.metadata, db_name=args.db_name)

    async def _find_similar_documents(self, arguments: Dict[str, Any]) -> BaseModel:
        args = self._parse(FindSimilarDocumentsRequest, arguments)
        return await self.pipeline.find(args.text, top_k=args.top_k, db_name=args.db_name)

    async def _delete_document(self, arguments: Dict[str, Any]) -> BaseModel:
        args = self._parse(DeleteDocumentRequest, arguments)
        return await self.pipeline.delete(args.doc_id, db_name=args.db_name)

    async def _create_database(self, arguments: Dict[str, Any]) -> BaseModel:
        args = self._parse(CreateDatabaseRequest, arguments)
        return await self.pipeline.create_store(args.db_name)

    @staticmethod
    def _error(request_id: Any, fault: RpcFault) -> RpcResponse:
        logger.error("RPC request failed", extra={"request_id": request_id, "code": fault.code, "error": fault.message})
        return RpcResponse(id=request_id, error=RpcError(code=fault.code, message=fault.message, data=fault.data))


__all__ = ["RpcDispatcher", "RpcFault", "get_tools_manifest", "TOOLS", "ERROR_CODES"]
