"""Integration tests for the complete content search service."""

import json
import pytest

from content_search.api.service import ContentSearchService
from content_search.core.exceptions import ContentSearchError, SourceUnavailableError, ValidationError
from content_search.core.source import JsonContentSource
from content_search.models.content import ContentRecord, ContentType

from conftest import FailingSource


class TestContentSearchServiceIntegration:
    """Integration tests for the complete service."""

    async def test_full_workflow(self, settings):
        """Test complete workflow from service creation to search."""
        async with ContentSearchService.create(settings=settings) as service:
            results = await service.search("javascript")
            assert [result.id for result in results] == ["blog1"]
            assert results[0].url == "/workshop/blog/blog1"

            results = await service.search("bakery")
            assert [result.id for result in results] == ["web-redesign"]
            assert results[0].url == "/portfolio/web-redesign"

            # Drafts and noindex records stay out of the index
            assert await service.search("rust") == []
            assert await service.search("nda") == []

            response = await service.search_page("design")
            assert response.total == 1
            assert response.to_dict()["results"][0]["id"] == "web-redesign"

            assert await service.get_suggestions("java") == ["JavaScript Tips", "javascript"]
            assert await service.get_related_content("web-redesign") == []

        assert settings.index_snapshot_path.exists()

    async def test_index_snapshot_contents(self, settings):
        async with ContentSearchService.create(settings=settings) as service:
            entries = await service.load_index()

        data = json.loads(settings.index_snapshot_path.read_text(encoding="utf-8"))
        assert {item["id"] for item in data} == {"blog1", "web-redesign"}
        assert [item["id"] for item in data] == [entry.id for entry in entries]
        assert all("searchableContent" in item for item in data)

    async def test_update_single_type(self, settings, content_dir):
        """Reindexing one type picks up new records and clears the cache."""
        async with ContentSearchService.create(settings=settings) as service:
            assert await service.search("typescript") == []
            assert service.cache_stats()["size"] == 1

            blog = json.loads((content_dir / "blog.json").read_text(encoding="utf-8"))
            blog.append({
                "id": "ts-generics",
                "title": "TypeScript Generics",
                "description": "Writing reusable typed functions",
                "tags": ["typescript"],
                "category": "tutorial",
                "status": "published"
            })
            (content_dir / "blog.json").write_text(json.dumps(blog), encoding="utf-8")

            assert await service.update_index("blog") is True
            assert service.cache_stats()["size"] == 0

            results = await service.search("typescript")
            assert [result.id for result in results] == ["ts-generics"]
            assert [result.id for result in await service.search("bakery")] == ["web-redesign"]

    async def test_full_rebuild(self, settings, content_dir):
        async with ContentSearchService.create(settings=settings) as service:
            (content_dir / "portfolio.json").unlink()

            assert await service.update_index() is True
            assert await service.search("bakery") == []
            assert len(await service.load_index()) == 1

    async def test_update_rejects_unknown_type(self, settings):
        async with ContentSearchService.create(settings=settings) as service:
            with pytest.raises(ValidationError):
                await service.update_index("podcast")

    async def test_cache_survives_restart(self, settings):
        """The result cache is persisted on close and restored on start."""
        async with ContentSearchService.create(settings=settings) as service:
            first = await service.search("javascript")

        assert settings.cache_snapshot_path.exists()

        async with ContentSearchService.create(settings=settings) as service:
            assert service.cache_stats()["size"] == 1
            assert service.cache_get("javascript") == first

    async def test_cache_not_persisted_when_disabled(self, settings):
        async with ContentSearchService.create(settings=settings, persist_cache=False) as service:
            await service.search("javascript")

        assert not settings.cache_snapshot_path.exists()

    async def test_cache_operations(self, settings):
        async with ContentSearchService.create(settings=settings) as service:
            await service.search("javascript")
            await service.search("javascript", {"limit": 1})
            await service.search("bakery")

            assert service.cache_clear("java") == 2
            assert service.cache_stats()["entries"][0]["key"] == "bakery"

            service.cache_put("custom", None, [])
            assert service.cache_get("custom") == []

            path = settings.cache_dir / "manual-cache.json"
            assert await service.cache_persist(path)
            service.cache_clear()
            assert await service.cache_load_persisted(path)
            assert service.cache_stats()["size"] == 2

    async def test_preload_popular_searches(self, settings):
        settings.cache_dir.mkdir(parents=True, exist_ok=True)
        settings.popular_stats_path.write_text(
            json.dumps({"javascript": 12, "design": 7, "rare": 1}), encoding="utf-8"
        )

        async with ContentSearchService.create(settings=settings) as service:
            queries = await service.preload_popular_searches(top_n=2)

            assert queries == ["javascript", "design"]
            assert service.cache_get("javascript") is not None
            assert service.cache_get("design") is not None
            assert service.cache_get("rare") is None

    async def test_preload_without_stats(self, settings):
        async with ContentSearchService.create(settings=settings) as service:
            assert await service.preload_popular_searches() == []

    async def test_save_index_clears_cache(self, settings, javascript_record):
        async with ContentSearchService.create(settings=settings) as service:
            await service.search("bakery")
            entries = service.build_index([javascript_record])

            assert await service.save_index(entries)
            assert service.cache_stats()["size"] == 0
            assert await service.search("bakery") == []

    async def test_build_index_rejects_duplicates(self, settings, javascript_record):
        async with ContentSearchService.create(settings=settings) as service:
            with pytest.raises(ValidationError):
                service.build_index([javascript_record, javascript_record])

            entries = await service.build_index_from_source()
            assert {entry.id for entry in entries} == {"blog1", "web-redesign"}

            entries = await service.build_index_from_source(include_all=True)
            assert "blog-draft" in {entry.id for entry in entries}

    async def test_search_variants(self, settings):
        async with ContentSearchService.create(settings=settings) as service:
            assert [r.id for r in await service.detailed_search("arrow functions")] == ["blog1"]
            assert await service.simple_search("arrow functions") == []

            listed = await service.list_content({"type": "portfolio"})
            assert [result.id for result in listed] == ["web-redesign"]

    async def test_stats_and_health(self, settings):
        async with ContentSearchService.create(settings=settings) as service:
            await service.search("javascript")

            stats = await service.get_stats()
            assert stats['service']['initialized'] is True
            assert stats['engine']['total_entries'] == 2

            health = await service.health_check()
            assert health['status'] == 'healthy'

    async def test_failing_source(self, settings):
        """A broken content source degrades to empty results."""
        async with ContentSearchService.create(settings=settings, source=FailingSource()) as service:
            assert await service.search("javascript") == []
            assert await service.update_index() is False

            health = await service.health_check()
            assert health['status'] == 'not_ready'

    async def test_single_type_update_with_failing_source(self, settings):
        """A failed per-type reindex reports False and keeps cached results."""
        async with ContentSearchService.create(settings=settings) as service:
            assert [result.id for result in await service.search("javascript")] == ["blog1"]
            assert service.cache_stats()["size"] == 1

            service.store.source = FailingSource()

            assert await service.update_index("blog") is False
            assert await service.update_index() is False
            assert service.cache_stats()["size"] == 1
            assert [result.id for result in await service.search("javascript")] == ["blog1"]
            assert {entry.id for entry in await service.load_index()} == {"blog1", "web-redesign"}

    async def test_uninitialized_service(self, settings):
        service = ContentSearchService(settings=settings, log_level="WARNING")

        try:
            with pytest.raises(ContentSearchError):
                await service.search("javascript")

            health = await service.health_check()
            assert health['status'] == 'not_initialized'
        finally:
            await service.close()


class TestJsonContentSource:
    """Test reading content records from JSON files."""

    async def test_reads_every_type(self, content_dir):
        records = await JsonContentSource(content_dir).load_records()
        ids = {record.id for record in records}

        assert ids == {"blog1", "blog-draft", "web-redesign", "hidden"}

    async def test_reads_single_type(self, content_dir):
        records = await JsonContentSource(content_dir).load_records(ContentType.PORTFOLIO)

        assert all(record.type == ContentType.PORTFOLIO for record in records)
        views = {record.id: record.views for record in records}
        assert views == {"web-redesign": 120, "hidden": None}

    async def test_invalid_records_skipped(self, content_dir):
        (content_dir / "tool.json").write_text(json.dumps([
            {"id": "ok", "title": "Color Picker", "status": "published"},
            {"id": "no-title"},
            "not an object"
        ]), encoding="utf-8")

        records = await JsonContentSource(content_dir).load_records(ContentType.TOOL)

        assert [record.id for record in records] == ["ok"]
        assert isinstance(records[0], ContentRecord)

    async def test_unreadable_file(self, content_dir):
        (content_dir / "tool.json").write_text("{broken", encoding="utf-8")

        with pytest.raises(SourceUnavailableError):
            await JsonContentSource(content_dir).load_records()

    async def test_non_array_file(self, content_dir):
        (content_dir / "page.json").write_text(json.dumps({"id": "x"}), encoding="utf-8")

        with pytest.raises(SourceUnavailableError):
            await JsonContentSource(content_dir).load_records(ContentType.PAGE)
