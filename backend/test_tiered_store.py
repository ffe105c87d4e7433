"""
Tiered store behaviour: tier preference, fallback, migration, prefix scans.
Run: pytest test_tiered_store.py
"""

import asyncio
import time
from dataclasses import replace

from conftest import BrokenPrimary, ReadOnlyPrimary
from repositories import FileStore, SQLiteTier, TieredStore


def test_set_then_get_reads_primary_and_leaves_fallback_untouched(tiered, primary, fallback):
    async def scenario():
        assert await tiered.set("doc-1", "<p>hi</p>") is True
        return await tiered.get("doc-1"), await primary.get("doc-1")

    value, stored = asyncio.run(scenario())
    assert value == "<p>hi</p>"
    assert stored == "<p>hi</p>"
    assert fallback.get_item("doc-1") is None
    assert not fallback.path.exists()


def test_overwrites_never_shadow_into_fallback(tiered, primary, fallback):
    async def scenario():
        await tiered.set("k", "v1")
        await tiered.set("k", "v2")
        return await tiered.get("k")

    assert asyncio.run(scenario()) == "v2"
    assert fallback.get_item("k") is None
    assert fallback.length() == 0


def test_primary_unavailable_uses_fallback(fallback_only, fallback):
    async def scenario():
        assert await fallback_only.set("k", "v") is True
        return await fallback_only.get("k")

    assert asyncio.run(scenario()) == "v"
    assert fallback.get_item("k") == "v"


def test_missing_primary_tier_behaves_as_unavailable(fallback, config):
    store = TieredStore(None, fallback, config)

    async def scenario():
        await store.set("k", "v")
        return await store.get("k"), await store.keys_with_prefix("")

    assert asyncio.run(scenario()) == ("v", ["k"])


def test_get_falls_through_when_primary_has_no_entry(tiered, fallback):
    fallback.set_item("legacy", "old")
    assert asyncio.run(tiered.get("legacy")) == "old"


def test_get_absent_everywhere_returns_none(tiered):
    assert asyncio.run(tiered.get("nope")) is None


def test_no_tiers_at_all_never_raises(config):
    store = TieredStore(None, None, config)

    async def scenario():
        assert await store.set("k", "v") is False
        await store.remove("k")
        return await store.get("k"), await store.keys_with_prefix("k"), await store.migrate_key("k")

    assert asyncio.run(scenario()) == (None, [], False)


def test_remove_unknown_key_is_noop(tiered, primary, fallback):
    async def scenario():
        await tiered.set("keep", "x")
        await tiered.remove("never-set")
        return await primary.all_keys()

    assert asyncio.run(scenario()) == ["keep"]
    assert fallback.length() == 0
    assert not fallback.path.exists()


def test_remove_clears_both_tiers(tiered, primary, fallback):
    fallback.set_item("k", "old")

    async def scenario():
        await tiered.set("k", "new")
        await tiered.remove("k")
        return await tiered.get("k")

    assert asyncio.run(scenario()) is None
    assert fallback.get_item("k") is None


def test_remove_with_broken_primary_still_clears_fallback(fallback_only, fallback):
    fallback.set_item("k", "v")
    asyncio.run(fallback_only.remove("k"))
    assert fallback.get_item("k") is None


def test_migrate_moves_value_into_primary(tiered, primary, fallback):
    fallback.set_item("k", "legacy-value")

    assert asyncio.run(tiered.migrate_key("k")) is True
    assert asyncio.run(primary.get("k")) == "legacy-value"
    assert fallback.get_item("k") is None


def test_migrate_keeps_fallback_copy_when_primary_write_fails(config, fallback):
    store = TieredStore(ReadOnlyPrimary(config), fallback, config)
    fallback.set_item("k", "legacy-value")

    assert asyncio.run(store.migrate_key("k")) is False
    assert fallback.get_item("k") == "legacy-value"
    assert asyncio.run(store.get("k")) == "legacy-value"


def test_migrate_without_legacy_value_is_noop(tiered, primary):
    async def scenario():
        await tiered.set("k", "current")
        moved = await tiered.migrate_key("k")
        return moved, await primary.get("k")

    assert asyncio.run(scenario()) == (False, "current")


def test_migrate_overwrites_newer_primary_value(tiered, primary, fallback):
    fallback.set_item("k", "from-fallback")

    async def scenario():
        await primary.put("k", "from-primary")
        await tiered.migrate_key("k")
        return await primary.get("k")

    assert asyncio.run(scenario()) == "from-fallback"


def test_cold_start_migration_of_editor_code(tiered, primary, fallback):
    fallback.set_item("chathtml-code", "<html>OLD</html>")

    moved = asyncio.run(tiered.migrate_keys(["chathtml-code", "chathtml-missing"]))

    assert moved == ["chathtml-code"]
    assert asyncio.run(primary.get("chathtml-code")) == "<html>OLD</html>"
    assert fallback.length() == 0


def test_prefix_scan_uses_primary_only(tiered, primary, fallback):
    fallback.set_item("doc-3", "c")

    async def scenario():
        for key in ("doc-1", "doc-2", "other"):
            await primary.put(key, key)
        return await tiered.keys_with_prefix("doc-")

    assert set(asyncio.run(scenario())) == {"doc-1", "doc-2"}


def test_prefix_scan_falls_back_to_fallback_keys(fallback_only, fallback):
    for key in ("doc-1", "doc-2", "other"):
        fallback.set_item(key, "x")

    assert sorted(asyncio.run(fallback_only.keys_with_prefix("doc-"))) == ["doc-1", "doc-2"]


def test_quota_exceeded_is_swallowed(config, tmp_path):
    small = FileStore(tmp_path / "small.json", quota_bytes=64)
    store = TieredStore(BrokenPrimary(), small, config)

    async def scenario():
        persisted = await store.set("k", "x" * 1000)
        return persisted, await store.get("k")

    assert asyncio.run(scenario()) == (False, None)


def test_broken_primary_is_tried_on_every_call(fallback, config):
    broken = BrokenPrimary()
    store = TieredStore(broken, fallback, config)

    async def scenario():
        await store.set("k", "v")
        await store.get("k")

    asyncio.run(scenario())
    assert broken.calls == [("put", "k"), ("get", "k")]


def test_hung_primary_times_out_into_fallback(fallback, config):
    class HungPrimary(BrokenPrimary):
        async def get(self, key):
            await asyncio.sleep(10)

    store = TieredStore(HungPrimary(), fallback, replace(config, primary_timeout=0.05))
    fallback.set_item("k", "v")

    assert asyncio.run(store.get("k")) == "v"


def test_slow_primary_write_is_not_cut_off_by_read_timeout(fallback, config):
    class SlowDiskTier(SQLiteTier):
        async def put(self, key, value):
            if value == "v1":
                await asyncio.to_thread(time.sleep, 0.3)
            await super().put(key, value)

    timed = replace(config, primary_timeout=0.1)
    store = TieredStore(SlowDiskTier(timed), fallback, timed)

    async def scenario():
        assert await store.set("k", "v1") is True
        assert await store.set("k", "v2") is True
        await asyncio.sleep(0.5)
        return await store.get("k")

    assert asyncio.run(scenario()) == "v2"
    assert fallback.get_item("k") is None


def test_get_does_not_promote_fallback_value(tiered, primary, fallback):
    fallback.set_item("legacy", "old")

    async def scenario():
        value = await tiered.get("legacy")
        return value, await primary.get("legacy"), await primary.all_keys()

    assert asyncio.run(scenario()) == ("old", None, [])
    assert fallback.get_item("legacy") == "old"
    assert fallback.length() == 1
