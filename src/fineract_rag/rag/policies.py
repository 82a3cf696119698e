"""
Policy Documents

Administrator-managed free-form documents (lending policies, product
rules, procedures). They are embedded and searched exactly like mirrored
Fineract entities but are never touched by the indexer.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, List, Optional

from ..db.document_store import DocumentStore
from ..llm.embedder import Embedder
from .models import IndexedDocument

logger = logging.getLogger("rag.policies")

POLICY = "policy"


class PolicyDocumentService:
    def __init__(self, store: DocumentStore, embedder: Embedder) -> None:
        self._store = store
        self._embedder = embedder

    async def add(
        self,
        title: str,
        content: str,
        metadata: Optional[Any] = None,
    ) -> IndexedDocument:
        external_id = uuid.uuid4().hex
        embedding = await self._embedder.embed_one(content)

        await self._store.upsert_document(
            external_id=external_id,
            document_type=POLICY,
            title=title,
            content=content,
            embedding=embedding,
            metadata=metadata,
        )
        logger.info("Policy document %r added", title)

        doc = await self._store.get_document_by_key(external_id, POLICY)
        if doc is None:
            raise RuntimeError(f"Policy document {title!r} was not persisted")
        return doc

    async def update(
        self,
        document_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
        metadata: Optional[Any] = None,
    ) -> Optional[IndexedDocument]:
        """
        Update a policy document. New content is re-embedded.

        Returns None if no policy document has this id.
        """
        existing = await self._store.get_document(document_id)
        if existing is None or existing.document_type != POLICY:
            return None

        embedding = await self._embedder.embed_one(content) if content is not None else None

        doc = await self._store.update_document(
            document_id,
            title=title,
            content=content,
            embedding=embedding,
            metadata=metadata,
        )
        logger.info("Policy document %s updated", document_id)
        return doc

    async def list(self) -> List[IndexedDocument]:
        return await self._store.list_documents(document_type=POLICY)

    async def delete(self, document_id: str) -> bool:
        existing = await self._store.get_document(document_id)
        if existing is None or existing.document_type != POLICY:
            return False

        deleted = await self._store.delete_document(document_id)
        if deleted:
            logger.info("Policy document %s deleted", document_id)
        return deleted
