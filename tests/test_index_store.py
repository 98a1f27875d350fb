"""Test index store loading, persistence and partial updates."""

import asyncio
import json
import pytest

from content_search.core.exceptions import SourceUnavailableError
from content_search.core.index_store import IndexStore
from content_search.core.source import InMemoryContentSource
from content_search.models.content import ContentRecord, ContentType
from content_search.models.index import SearchIndexEntry

from conftest import FailingSource, FakeClock


class TestIndexStore:
    """Test IndexStore functionality."""

    async def test_load_builds_and_persists_when_no_snapshot(self, store, index_path):
        """A missing snapshot triggers a build that is written to disk."""
        assert not index_path.exists()

        entries = await store.load()

        assert {entry.id for entry in entries} == {"blog1", "blog2", "portfolio1", "plugin1", "tool1"}
        assert index_path.exists()
        data = json.loads(index_path.read_text(encoding="utf-8"))
        assert [item["id"] for item in data] == [entry.id for entry in entries]

    async def test_load_prefers_snapshot(self, source, index_path, fixed_builder):
        """An existing snapshot is served without consulting the source."""
        snapshot_entry = SearchIndexEntry(
            id="from-snapshot", type=ContentType.PAGE, title="Snapshot", description=""
        )
        index_path.parent.mkdir(parents=True)
        index_path.write_text(json.dumps([snapshot_entry.to_dict()]), encoding="utf-8")

        store = IndexStore(source=source, snapshot_path=index_path, builder=fixed_builder)
        entries = await store.load()

        assert entries == [snapshot_entry]

    async def test_corrupt_snapshot_is_rebuilt(self, store, index_path):
        index_path.parent.mkdir(parents=True)
        index_path.write_text("{not json", encoding="utf-8")

        entries = await store.load()

        assert len(entries) == 5
        assert isinstance(json.loads(index_path.read_text(encoding="utf-8")), list)

    async def test_memory_copy_reused_until_ttl(self, source, index_path, fixed_builder):
        clock = FakeClock()
        store = IndexStore(
            source=source, snapshot_path=index_path, builder=fixed_builder,
            memory_ttl=60, clock=clock
        )
        first = await store.load()

        index_path.write_text("[]", encoding="utf-8")
        assert await store.load() is first

        clock.advance(61)
        assert await store.load() == []

    async def test_invalidate_rereads_snapshot(self, store, index_path):
        await store.load()
        index_path.write_text("[]", encoding="utf-8")

        store.invalidate()
        assert store.entries is None
        assert await store.load() == []

    async def test_save_then_load_round_trip(self, store, index_path, source, fixed_builder):
        entries = fixed_builder.build(await source.load_records())

        assert await store.save(entries)
        assert await store.load() == entries

        fresh_store = IndexStore(source=source, snapshot_path=index_path, builder=fixed_builder)
        assert await fresh_store.load() == entries

    async def test_save_failure_keeps_memory_copy(self, tmp_path, source, fixed_builder):
        """A write failure is reported but the new index is still served."""
        blocker = tmp_path / "not-a-directory"
        blocker.write_text("", encoding="utf-8")
        store = IndexStore(
            source=source, snapshot_path=blocker / "search-index.json", builder=fixed_builder
        )
        entries = fixed_builder.build(await source.load_records())

        assert await store.save(entries) is False
        assert await store.load() == entries

    async def test_source_failure_without_snapshot(self, index_path, fixed_builder):
        store = IndexStore(source=FailingSource(), snapshot_path=index_path, builder=fixed_builder)

        assert await store.load() == []
        assert not index_path.exists()

    async def test_rebuild_failure_keeps_last_good_index(self, store):
        entries = await store.load()
        store.source = FailingSource()

        assert await store.rebuild() is False
        assert await store.load() == entries

    async def test_rebuild_picks_up_changes(self, store, source, javascript_record):
        await store.load()
        source.replace([javascript_record])

        assert await store.rebuild() is True
        assert [entry.id for entry in await store.load()] == ["blog1"]

    async def test_update_type_replaces_only_that_type(self, store, source, sample_records, index_path, fixed_builder):
        """Entries of other types survive a per-type update untouched."""
        await store.load()
        new_post = ContentRecord(
            id="blog3",
            type=ContentType.BLOG,
            title="CSS Grid Layouts",
            description="Two-dimensional layouts with CSS grid",
            tags=["css"]
        )
        others = [record for record in sample_records if record.type != ContentType.BLOG]
        source.replace(others + [new_post])

        merged = await store.update_type(ContentType.BLOG)
        ids = {entry.id for entry in merged}

        assert ids == {"blog3", "portfolio1", "plugin1", "tool1"}
        fresh_store = IndexStore(source=source, snapshot_path=index_path, builder=fixed_builder)
        assert {entry.id for entry in await fresh_store.load()} == ids

    async def test_update_type_with_explicit_entries(self, store):
        await store.load()
        replacement = SearchIndexEntry(id="t2", type=ContentType.TOOL, title="Color Picker", description="")
        stray = SearchIndexEntry(id="b9", type=ContentType.BLOG, title="Stray", description="")

        merged = await store.update_type("tool", [replacement, stray])
        ids = {entry.id for entry in merged}

        assert "t2" in ids
        assert "tool1" not in ids
        assert "b9" not in ids

    async def test_update_type_with_failing_source(self, store):
        entries = await store.load()
        store.source = FailingSource()

        with pytest.raises(SourceUnavailableError):
            await store.update_type(ContentType.BLOG)
        assert await store.load() == entries

    async def test_concurrent_updates_of_different_types(self, store, source, sample_records, index_path, fixed_builder):
        """Two overlapping per-type updates both land in the merged index."""
        await store.load()
        new_post = ContentRecord(
            id="blog3",
            type=ContentType.BLOG,
            title="CSS Grid Layouts",
            description="Two-dimensional layouts with CSS grid"
        )
        new_tool = ContentRecord(
            id="tool2",
            type=ContentType.TOOL,
            title="Color Picker",
            description="Pick colors and copy hex codes"
        )
        others = [
            record for record in sample_records
            if record.type not in (ContentType.BLOG, ContentType.TOOL)
        ]
        source.replace(others + [new_post, new_tool])

        await asyncio.gather(
            store.update_type(ContentType.BLOG),
            store.update_type(ContentType.TOOL)
        )

        expected = {"blog3", "tool2", "portfolio1", "plugin1"}
        assert {entry.id for entry in await store.load()} == expected
        fresh_store = IndexStore(source=source, snapshot_path=index_path, builder=fixed_builder)
        assert {entry.id for entry in await fresh_store.load()} == expected

    async def test_reads_during_update_see_a_whole_index(self, store, source, javascript_record):
        before = await store.load()
        source.replace([javascript_record])

        results = await asyncio.gather(store.update_type(ContentType.BLOG), store.load())

        assert results[1] in (before, results[0])

    async def test_update_type_rejects_unknown_type(self, store):
        with pytest.raises(ValueError):
            await store.update_type("podcast")
