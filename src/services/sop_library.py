"""SOP (standart çalışma prosedürü) kategori ve doküman deposu."""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date
from typing import Callable, Optional

from src.models.errors import CategoryNotFound, NotFoundError, ValidationError
from src.models.maintenance import SOPCategory, SOPDocument
from src.storage.base import Collection, PersistenceAdapter

logger = logging.getLogger(__name__)


class SOPLibrary:
    def __init__(self, store: PersistenceAdapter, today_provider: Optional[Callable[[], date]] = None):
        self.store = store
        self._today = today_provider or date.today

    # --- Kategoriler ---

    async def list_categories(self) -> list[SOPCategory]:
        rows = await self.store.list(Collection.SOP_CATEGORIES, order_by="name")
        return [SOPCategory.from_dict(r) for r in rows]

    async def upsert_category(self, category: SOPCategory) -> SOPCategory:
        if not category.name:
            raise ValidationError("Kategori adı zorunludur")
        if not category.id:
            category = replace(category, id=str(uuid.uuid4()))
        await self.store.upsert(Collection.SOP_CATEGORIES, [category.to_dict()])
        return category

    async def delete_category(self, category_id: str) -> int:
        """Kategoriyi ve ona bağlı tüm dokümanları siler.

        Returns:
            Silinen doküman sayısı.
        """
        self.store.ensure_available()
        if await self.store.get(Collection.SOP_CATEGORIES, category_id) is None:
            raise CategoryNotFound(category_id)
        documents = await self.list_documents(category_id)
        for doc in documents:
            await self.store.delete(Collection.SOP_DOCUMENTS, doc.id)
        await self.store.delete(Collection.SOP_CATEGORIES, category_id)
        logger.info("SOP kategorisi silindi: %s (%d doküman)", category_id, len(documents))
        return len(documents)

    # --- Dokümanlar ---

    async def list_documents(self, category_id: Optional[str] = None) -> list[SOPDocument]:
        rows = await self.store.list(Collection.SOP_DOCUMENTS, order_by="title")
        docs = [SOPDocument.from_dict(r) for r in rows]
        if category_id:
            docs = [d for d in docs if d.category_id == category_id]
        return docs

    async def upsert_document(self, document: SOPDocument) -> SOPDocument:
        """Dokümanı kaydeder; her kayıtta updated_at bugünün tarihi olur."""
        if not document.title:
            raise ValidationError("Doküman başlığı zorunludur")
        self.store.ensure_available()
        if await self.store.get(Collection.SOP_CATEGORIES, document.category_id) is None:
            raise CategoryNotFound(document.category_id)
        document = replace(
            document,
            id=document.id or str(uuid.uuid4()),
            updated_at=self._today().isoformat(),
        )
        await self.store.upsert(Collection.SOP_DOCUMENTS, [document.to_dict()])
        return document

    async def delete_document(self, document_id: str) -> None:
        self.store.ensure_available()
        if await self.store.get(Collection.SOP_DOCUMENTS, document_id) is None:
            raise NotFoundError(document_id, f"SOP dokümanı bulunamadı: {document_id}")
        await self.store.delete(Collection.SOP_DOCUMENTS, document_id)
