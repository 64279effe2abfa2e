import socket
import time

import pytest

from quill_nrepl.bencode import encode
from quill_nrepl.client import NreplClient
from quill_nrepl.config import ServerConfig
from quill_nrepl.server import NreplServer


def test_eval_round_trip(client):
    assert client.request("eval", code="(+ 1 3)") == [
        {"id": "1", "ns": "user", "value": "4"},
        {"id": "1", "ns": "user", "status": ["done"]},
    ]


def test_division_by_zero_over_the_wire(client):
    err, ex, done = client.request("eval", code="(/ 1 0)")
    assert "ZeroDivisionError" in err["err"]
    assert ex["status"] == ["eval-error"]
    assert ex["ns"] == "user"
    assert done == {"id": "1", "ns": "user", "status": ["done"]}


def test_complete_after_definition(client):
    client.request("eval", code="(def abc 42)")
    (resp,) = client.request("complete", prefix="ab", ns="user")
    assert {"candidate": "abc", "ns": "user", "type": "var"} in resp["completions"]
    client.request("eval", code="(ns unrelated)")
    (resp,) = client.request("complete", prefix="ab", ns="unrelated")
    assert all(c.get("ns") != "user" for c in resp["completions"])


@pytest.mark.parametrize("chunk_size", [3, 4096])
def test_many_round_trips_with_any_chunk_size(server_factory, chunk_size):
    server = server_factory(chunk_size=chunk_size)
    with NreplClient(*server.address, chunk_size=chunk_size) as client:
        for i in range(100):
            responses = client.request("eval", code=f'(str "item-" {i})')
            assert responses[0]["value"] == f'"item-{i}"'
            assert responses[-1]["status"] == ["done"]


def test_split_writes_are_reassembled(client):
    frame = encode({"op": "eval", "id": "split", "code": "(* 6 7)"})
    for byte in frame:
        client.sock.sendall(bytes([byte]))
    assert client.read() == {"id": "split", "ns": "user", "value": "42"}
    assert client.read()["status"] == ["done"]


def test_pipelined_requests_answered_in_order(client):
    client.send({"op": "eval", "id": "a", "code": "1"})
    client.send({"op": "eval", "id": "b", "code": "2"})
    ids = [client.read()["id"] for _ in range(4)]
    assert ids == ["a", "a", "b", "b"]


def test_sessions_are_isolated_per_connection(server):
    with NreplClient(*server.address) as first, NreplClient(*server.address) as second:
        first.request("eval", code="(ns first.ns)")
        assert first.request("eval", code="1")[0]["ns"] == "first.ns"
        assert second.request("eval", code="1")[0]["ns"] == "user"
        # definitions are shared through the namespace registry
        first.request("eval", code="(def shared 7)")
        assert second.request("eval", code="first.ns/shared")[0]["value"] == "7"


def test_framing_error_closes_only_that_connection(server):
    with NreplClient(*server.address) as bad, NreplClient(*server.address) as good:
        bad.sock.sendall(b"x-not-bencode")
        with pytest.raises(ConnectionError):
            bad.read()
        assert good.request("eval", code="(+ 1 1)")[0]["value"] == "2"


def test_unhashable_op_keeps_connection_open(client):
    client.send({"op": ["eval"], "id": "x"})
    assert client.read() == {"id": "x", "status": ["error", "unknown-op", "done"]}
    assert client.request("eval", code="(+ 1 1)")[0]["value"] == "2"


def test_requests_before_garbage_are_answered(server):
    with NreplClient(*server.address) as bad:
        bad.sock.sendall(encode({"op": "eval", "id": "ok", "code": "1"}) + b"?junk")
        assert bad.read() == {"id": "ok", "ns": "user", "value": "1"}
        assert bad.read() == {"id": "ok", "ns": "user", "status": ["done"]}
        with pytest.raises(ConnectionError):
            bad.read()


def test_stop_returns_promptly_with_open_clients():
    server = NreplServer(ServerConfig(port=0))
    host, port = server.start().result(timeout=5)
    client = NreplClient(host, port)
    try:
        client.request("describe")
        started = time.monotonic()
        server.stop()
        assert time.monotonic() - started < 2.0
        with pytest.raises(OSError):
            socket.create_connection((host, port), timeout=1).close()
    finally:
        client.close()


def test_stop_unblocks_connected_client():
    server = NreplServer(ServerConfig(port=0))
    server.start().result(timeout=5)
    client = NreplClient(*server.address)
    try:
        client.request("describe")
        server.stop()
        with pytest.raises((ConnectionError, OSError)):
            client.read()
    finally:
        client.close()


def test_port_file_written_and_removed(tmp_path):
    port_file = tmp_path / ".nrepl-port"
    server = NreplServer(ServerConfig(port=0, port_file=port_file))
    _, port = server.start().result(timeout=5)
    assert port_file.read_text() == str(port)
    server.stop()
    assert not port_file.exists()


def test_start_future_reports_bind_errors():
    taken = socket.socket()
    taken.bind(("127.0.0.1", 0))
    taken.listen(1)
    try:
        server = NreplServer(ServerConfig(port=taken.getsockname()[1]))
        with pytest.raises(OSError):
            server.start().result(timeout=5)
    finally:
        taken.close()


def test_context_manager():
    with NreplServer() as server:
        with NreplClient(*server.address) as client:
            assert client.request("close") == [{"id": "1", "status": ["done"]}]
        host, port = server.address
    with pytest.raises(OSError):
        socket.create_connection((host, port), timeout=1).close()
