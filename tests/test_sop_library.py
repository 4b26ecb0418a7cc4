"""SOP kategori ve doküman testleri."""

import asyncio
from datetime import date

import pytest

from src.models.errors import CategoryNotFound, NotFoundError, ValidationError
from src.models.maintenance import SOPCategory, SOPDocument
from src.services.sop_library import SOPLibrary
from src.storage import LocalStore


def _run(coro):
    return asyncio.run(coro)


def _create_library():
    return SOPLibrary(LocalStore(), today_provider=lambda: date(2024, 3, 10))


class TestCategories:

    def test_upsert_assigns_id(self):
        library = _create_library()
        category = _run(library.upsert_category(SOPCategory(id="", name="Motors")))
        assert category.id
        assert [c.name for c in _run(library.list_categories())] == ["Motors"]

    def test_name_required(self):
        library = _create_library()
        with pytest.raises(ValidationError):
            _run(library.upsert_category(SOPCategory(id="c1", name="")))

    def test_delete_cascades_to_documents(self):
        library = _create_library()
        motors = _run(library.upsert_category(SOPCategory(id="c1", name="Motors")))
        pumps = _run(library.upsert_category(SOPCategory(id="c2", name="Pumps")))
        _run(library.upsert_document(SOPDocument(id="d1", category_id=motors.id, title="Bearing SOP")))
        _run(library.upsert_document(SOPDocument(id="d2", category_id=motors.id, title="Coupling SOP")))
        _run(library.upsert_document(SOPDocument(id="d3", category_id=pumps.id, title="Oil change SOP")))

        assert _run(library.delete_category(motors.id)) == 2
        assert [c.id for c in _run(library.list_categories())] == ["c2"]
        assert [d.id for d in _run(library.list_documents())] == ["d3"]

    def test_delete_missing_category(self):
        library = _create_library()
        with pytest.raises(CategoryNotFound):
            _run(library.delete_category("missing"))


class TestDocuments:

    def test_upsert_sets_updated_at(self):
        library = _create_library()
        _run(library.upsert_category(SOPCategory(id="c1", name="Motors")))
        doc = _run(library.upsert_document(
            SOPDocument(id="", category_id="c1", title="Bearing SOP", content="1. Clean nipple", updated_at="2020-01-01")
        ))
        assert doc.id
        assert doc.updated_at == "2024-03-10"
        assert _run(library.list_documents("c1"))[0].content == "1. Clean nipple"

    def test_title_required(self):
        library = _create_library()
        _run(library.upsert_category(SOPCategory(id="c1", name="Motors")))
        with pytest.raises(ValidationError):
            _run(library.upsert_document(SOPDocument(id="d1", category_id="c1", title="")))

    def test_unknown_category(self):
        library = _create_library()
        with pytest.raises(CategoryNotFound):
            _run(library.upsert_document(SOPDocument(id="d1", category_id="missing", title="SOP")))

    def test_delete_document(self):
        library = _create_library()
        _run(library.upsert_category(SOPCategory(id="c1", name="Motors")))
        _run(library.upsert_document(SOPDocument(id="d1", category_id="c1", title="SOP")))
        _run(library.delete_document("d1"))
        assert _run(library.list_documents()) == []
        with pytest.raises(NotFoundError):
            _run(library.delete_document("d1"))
