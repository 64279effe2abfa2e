import pytest

from quill.interpreter import Interpreter
from quill_nrepl.client import NreplClient
from quill_nrepl.config import ServerConfig
from quill_nrepl.server import NreplServer


@pytest.fixture
def interp():
    """Fresh interpreter with its own namespace registry."""
    return Interpreter()


@pytest.fixture
def server_factory():
    """Start servers on ephemeral ports; every one started is stopped afterwards."""
    started = []

    def make(**settings):
        server = NreplServer(ServerConfig(port=0, **settings))
        server.start().result(timeout=5)
        started.append(server)
        return server

    yield make
    for server in started:
        server.stop()


@pytest.fixture
def server(server_factory):
    return server_factory()


@pytest.fixture
def client(server):
    with NreplClient(*server.address) as c:
        yield c
