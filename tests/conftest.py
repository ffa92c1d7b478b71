"""Shared test fixtures."""

import fakeredis
import pytest

from redis_map import RedisMap


@pytest.fixture
def server():
    return fakeredis.FakeServer()


@pytest.fixture
def client(server):
    return fakeredis.FakeRedis(server=server, decode_responses=True)


@pytest.fixture
def pool(client):
    return client.connection_pool


@pytest.fixture
def redis_map(pool):
    return RedisMap(prefix="test:map", connection_pool=pool)


@pytest.fixture
def other_map(pool):
    return RedisMap(prefix="other", connection_pool=pool)
