"""Shared fixtures: isolated store config, real tiers under tmp_path, failing tier doubles."""

import pytest

from repositories import FileStore, SQLiteTier, StoreConfig, TieredStore, TransactionFailure
from repositories.base import ConnectionFailure


class BrokenPrimary:
    """Primary tier whose connection can never be opened."""

    def __init__(self):
        self.calls = []

    async def get(self, key):
        self.calls.append(("get", key))
        raise ConnectionFailure("simulated open failure")

    async def put(self, key, value):
        self.calls.append(("put", key))
        raise ConnectionFailure("simulated open failure")

    async def delete(self, key):
        self.calls.append(("delete", key))
        raise ConnectionFailure("simulated open failure")

    async def all_keys(self):
        self.calls.append(("all_keys", None))
        raise ConnectionFailure("simulated open failure")


class ReadOnlyPrimary(SQLiteTier):
    """Real SQLite tier whose writes abort."""

    async def put(self, key, value):
        raise TransactionFailure("simulated write abort")


@pytest.fixture
def config(tmp_path):
    return StoreConfig(data_dir=tmp_path, store_name="test", table_name="kv")


@pytest.fixture
def primary(config):
    return SQLiteTier(config)


@pytest.fixture
def fallback(config):
    return FileStore(config.fallback_path, quota_bytes=config.fallback_quota_bytes)


@pytest.fixture
def tiered(primary, fallback, config):
    return TieredStore(primary, fallback, config)


@pytest.fixture
def fallback_only(fallback, config):
    return TieredStore(BrokenPrimary(), fallback, config)
