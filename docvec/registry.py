"""
Service registry: the embeddings client and store handles for one process.
"""

from __future__ import annotations

import logging

from docvec.config import Settings, settings as default_settings, validate_embedding_config
from docvec.embeddings.client import EmbeddingsClient
from docvec.vector_store import StoreRegistry, get_store_registry

logger = logging.getLogger(__name__)


class ServiceRegistry:
    """
    Holds the shared collaborators handed to DocumentPipeline and BatchLoader.

    Construction validates the embedding configuration, so an unsupported
    model or dimensionality fails at startup rather than on the first call.
    ``aclose()`` closes every open store and the embeddings client.
    """

    def __init__(
        self,
        config: Settings | None = None,
        embeddings: EmbeddingsClient | None = None,
        stores: StoreRegistry | None = None,
    ) -> None:
        self.settings = config or default_settings
        validate_embedding_config(self.settings)
        self.embeddings = embeddings or EmbeddingsClient(
            model=self.settings.embedding_model_name,
            dimensions=self.settings.embedding_dimensions,
            max_batch_size=self.settings.embedding_batch_size,
        )
        self.stores = stores or get_store_registry(self.settings)
        self._closed = False

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        logger.info("Closing service registry", extra={"open_stores": len(self.stores.open_handles)})
        try:
            await self.stores.close_all()
        finally:
            await self.embeddings.aclose()

    async def __aenter__(self) -> "ServiceRegistry":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


__all__ = ["ServiceRegistry"]
