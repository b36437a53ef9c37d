from __future__ import annotations

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field


# Tool arguments
class InsertDocumentRequest(BaseModel):
    """Arguments of insert_document."""

    text: str = Field(..., description="The text content to insert (max 100,000 characters)")
    metadata: Dict[str, Any] | None = Field(default=None, description="Optional metadata to associate with the document")
    db_name: str | None = Field(default=None, description="Named database; default database when omitted")


class FindSimilarDocumentsRequest(BaseModel):
    """Arguments of find_similar_documents."""

    text: str = Field(..., description="The query text to find similar documents for")
    top_k: int | None = Field(default=None, description="Number of similar documents to return")
    db_name: str | None = None


class DeleteDocumentRequest(BaseModel):
    """Arguments of delete_document."""

    doc_id: str = Field(..., description="The document ID to delete")
    db_name: str | None = None


class CreateDatabaseRequest(BaseModel):
    """Arguments of create_database."""

    db_name: str = Field(..., description="Name of the database to create")


# Tool results
class InsertDocumentResult(BaseModel):
    doc_id: str
    chunk_count: int = Field(..., ge=1)


class SearchResult(BaseModel):
    chunk_id: str
    doc_id: str
    chunk_index: int
    text: str
    score: float
    metadata: Dict[str, Any] | None = None


class FindSimilarDocumentsResult(BaseModel):
    results: List[SearchResult]


class DeleteDocumentResult(BaseModel):
    deleted_chunks: int = Field(..., ge=0)


class CreateDatabaseResult(BaseModel):
    success: bool
    db_path: str


# JSON-RPC envelope
class RpcError(BaseModel):
    code: str
    message: str
    data: Any | None = None


class RpcRequest(BaseModel):
    jsonrpc: Literal["2.0"]
    id: str | int | None = None
    method: str = Field(..., min_length=1)
    params: Dict[str, Any] | None = None


class RpcResponse(BaseModel):
    jsonrpc: Literal["2.0"] = "2.0"
    id: str | int | None = None
    result: Any | None = None
    error: RpcError | None = None

    def to_wire(self) -> Dict[str, Any]:
        """Dump without empty members; ``id`` is always present, null included."""
        body = self.model_dump(exclude_none=True)
        body["id"] = self.id
        return body


__all__ = [
    "InsertDocumentRequest",
    "FindSimilarDocumentsRequest",
    "DeleteDocumentRequest",
    "CreateDatabaseRequest",
    "InsertDocumentResult",
    "SearchResult",
    "FindSimilarDocumentsResult",
    "DeleteDocumentResult",
    "CreateDatabaseResult",
    "RpcError",
    "RpcRequest",
    "RpcResponse",
]
