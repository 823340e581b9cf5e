"""Code retriever: embed a question and reassemble the nearest chunks.

Usage::

    from cxxrag.retrieval.retriever import CodeRetriever

    retriever = CodeRetriever(embedder, store)
    for hit in retriever.search("where is the allocator freed?"):
        print(hit.path, hit.line)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from cxxrag.errors import StoreResponseError
from cxxrag.retrieval.models import ChunkMetadata, QueryResult

if TYPE_CHECKING:
    from cxxrag.ingestion.embedder import EmbeddingGateway
    from cxxrag.retrieval.base import VectorStoreBase
    from cxxrag.retrieval.models import StoreQueryResponse

logger = logging.getLogger(__name__)


class CodeRetriever:
    """One-shot query flow over any :class:`VectorStoreBase`.

    Parameters
    ----------
    embedder:
        Gateway used to embed the query text.
    store:
        A concrete vector-store backend.
    default_k:
        Number of nearest records requested from the store.
    """

    def __init__(
        self,
        embedder: EmbeddingGateway,
        store: VectorStoreBase,
        *,
        default_k: int = 5,
    ) -> None:
        self._embedder = embedder
        self._store = store
        self.default_k = default_k

    # -- public API -----------------------------------------------------------

    def search(self, query: str, *, k: int | None = None) -> list[QueryResult]:
        """Run a similarity search and return the surviving hits in store order.

        Parameters
        ----------
        query:
            Free-form text; embedded as a single unit.
        k:
            Number of results (defaults to ``self.default_k``).

        Raises
        ------
        EmbeddingError
            The query could not be embedded.
        StoreError
            The store could not be queried or answered without any result
            group, documents or metadatas.
        """
        k = k or self.default_k

        logger.info("Generating query embedding")
        embedding = self._embedder.embed_one(query)

        logger.info("Requesting top %d records", k)
        response = self._store.query(embedding, k=k)
        return self._to_results(response)

    # -- internals ------------------------------------------------------------

    def _to_results(self, response: StoreQueryResponse) -> list[QueryResult]:
        if response.metadatas is None:
            raise StoreResponseError("store response has no metadatas")
        if response.documents is None:
            raise StoreResponseError("store response has no documents")
        if not response.metadatas or not response.documents:
            raise StoreResponseError("store response has no result groups")

        # One embedding was submitted, so the last group is the only one.
        metadatas = response.metadatas[-1]
        documents = response.documents[-1]

        results: list[QueryResult] = []
        for rank, (meta, doc) in enumerate(zip(metadatas, documents)):
            if meta is None:
                logger.warning("Skipping hit %d: missing metadata", rank)
                continue
            if doc is None:
                logger.warning("Skipping hit %d: missing document", rank)
                continue
            try:
                location = ChunkMetadata.model_validate(meta, strict=True)
            except ValidationError as exc:
                fields = ", ".join(".".join(map(str, e["loc"])) or "metadata" for e in exc.errors())
                logger.warning("Skipping hit %d: invalid metadata field(s) %s", rank, fields)
                continue
            results.append(QueryResult(path=location.path, line=location.line, code=doc))
        return results
