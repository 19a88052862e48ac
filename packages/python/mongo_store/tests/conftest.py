import pytest
from loguru import logger

from mongo_fakes import FakeServer
from mongo_store import ConnectionPool, MongoStore


@pytest.fixture()
def server():
    return FakeServer()


@pytest.fixture()
def pool(server):
    return ConnectionPool(client_factory=server.client)


@pytest.fixture()
def store(pool):
    return MongoStore(
        uri="mongodb://localhost:27017",
        timeout=5,
        database_name="testdb",
        collection_name="testcol",
        pool=pool,
    )


@pytest.fixture()
def collection(server):
    return server.collection("testdb", "testcol")


@pytest.fixture()
def logged_warnings():
    messages = []
    handler_id = logger.add(messages.append, level="WARNING", format="{message}")
    yield messages
    logger.remove(handler_id)
