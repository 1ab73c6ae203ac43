# -*- coding: utf-8 -*-
# pylint: disable=redefined-outer-name
import os

import fakeredis
import pytest

from aideas_mcp.manager.collections import LocalTTLMapping, RedisTTLMapping


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def local_mapping(tmp_path, clock):
    return LocalTTLMapping(str(tmp_path / "store"), 60, clock=clock)


class TestLocalTTLMapping:
    def test_set_and_get(self, local_mapping):
        local_mapping.set("t1", {"agents": ["blog"]})
        assert local_mapping.get("t1") == {"agents": ["blog"]}
        assert "t1" in local_mapping

    def test_missing_key(self, local_mapping):
        assert local_mapping.get("nope") is None
        assert "nope" not in local_mapping

    def test_entry_expires_after_ttl(self, local_mapping, clock):
        local_mapping.set("t1", "v")
        clock.advance(59)
        assert local_mapping.get("t1") == "v"
        clock.advance(1)
        assert local_mapping.get("t1") is None

    def test_set_refreshes_expiry(self, local_mapping, clock):
        local_mapping.set("t1", "old")
        clock.advance(50)
        local_mapping.set("t1", "new")
        clock.advance(50)
        assert local_mapping.get("t1") == "new"

    def test_survives_a_new_instance(self, tmp_path, clock):
        directory = str(tmp_path / "store")
        LocalTTLMapping(directory, 60, clock=clock).set("t1", [1, 2])
        assert LocalTTLMapping(directory, 60, clock=clock).get("t1") == [1, 2]

    def test_delete(self, local_mapping):
        local_mapping.set("t1", "v")
        local_mapping.delete("t1")
        local_mapping.delete("t1")
        assert local_mapping.get("t1") is None

    def test_scan_skips_expired_keys(self, local_mapping, clock):
        local_mapping.set("task:1", "a")
        clock.advance(30)
        local_mapping.set("task:2", "b")
        local_mapping.set("other", "c")
        clock.advance(40)
        assert list(local_mapping.scan("task:")) == ["task:2"]

    def test_purge_expired(self, local_mapping, clock):
        local_mapping.set("a", 1)
        local_mapping.set("b", 2)
        clock.advance(60)
        local_mapping.set("c", 3)
        assert local_mapping.purge_expired() == 2
        assert sorted(local_mapping.scan()) == ["c"]

    def test_unreadable_entry_is_dropped(self, local_mapping):
        local_mapping.set("t1", "v")
        path = local_mapping._path("t1")  # pylint: disable=protected-access
        with open(path, "w", encoding="utf-8") as f:
            f.write("{not json")
        assert local_mapping.get("t1") is None
        assert not os.path.exists(path)

    def test_clear(self, local_mapping):
        local_mapping.set("a", 1)
        local_mapping.set("b", 2)
        local_mapping.clear()
        assert list(local_mapping.scan()) == []


@pytest.fixture
def redis_mapping():
    client = fakeredis.FakeRedis(decode_responses=True)
    client.flushall()
    return RedisTTLMapping(client, 60, prefix="tasks")


class TestRedisTTLMapping:
    def test_set_and_get(self, redis_mapping):
        redis_mapping.set("t1", {"agents": ["blog"]})
        assert redis_mapping.get("t1") == {"agents": ["blog"]}
        assert "t1" in redis_mapping

    def test_keys_are_prefixed_and_expire(self, redis_mapping):
        redis_mapping.set("t1", "v")
        ttl = redis_mapping.client.ttl("tasks:t1")
        assert 0 < ttl <= 60

    def test_missing_key(self, redis_mapping):
        assert redis_mapping.get("nope") is None

    def test_scan_strips_prefix(self, redis_mapping):
        redis_mapping.set("a", 1)
        redis_mapping.set("b", 2)
        redis_mapping.client.set("unrelated", "x")
        assert sorted(redis_mapping.scan()) == ["a", "b"]

    def test_delete_and_clear(self, redis_mapping):
        redis_mapping.set("a", 1)
        redis_mapping.set("b", 2)
        redis_mapping.delete("a")
        assert redis_mapping.get("a") is None
        redis_mapping.clear()
        assert list(redis_mapping.scan()) == []

    def test_bytes_keys(self):
        client = fakeredis.FakeRedis()
        client.flushall()
        mapping = RedisTTLMapping(client, 60, prefix="p")
        mapping.set("k", {"x": 1})
        assert list(mapping.scan()) == ["k"]
        assert mapping.get("k") == {"x": 1}
