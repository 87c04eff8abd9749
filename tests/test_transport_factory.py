import logging
import pytest
from soulreg_core.transport import (
    transport_factory, LocalAdapter, HTTPAdapter, KafkaAdapter,
    TransportPermanentError, TransportTransientError,
)
from soulreg_core.transport import transport_http

# CMD Line Usage: pytest -v -s --log-cli-level=DEBUG tests/test_transport_factory.py


def test_local_pubsub_loopback(caplog):
    """Ensure LocalAdapter delivers published events to subscribers."""
    bus = LocalAdapter()
    received = []

    bus.subscribe("soulreg.mint", received.append)
    bus.publish("soulreg.mint", {"name": "Mint", "payload": {"owner": "0xa1"}})
    bus.publish("soulreg.burn", b'{"name": "Burn"}')

    assert received == [{"name": "Mint", "payload": {"owner": "0xa1"}}]
    assert bus.published[1] == ("soulreg.burn", {"name": "Burn"})
    assert "LOCAL PUB" in caplog.text


def test_transport_factory_modes(monkeypatch):
    """Verify that transport_factory returns correct adapter per SOULREG_TRANSPORT."""
    monkeypatch.delenv("SOULREG_TRANSPORT", raising=False)
    assert isinstance(transport_factory(), LocalAdapter)

    monkeypatch.setenv("SOULREG_TRANSPORT", "http")
    monkeypatch.setenv("SOULREG_INDEXER_URL", "http://indexer:9000/")
    http = transport_factory()
    assert isinstance(http, HTTPAdapter)
    assert http.base_url == "http://indexer:9000"

    monkeypatch.setenv("KAFKA_ENABLED", "0")
    kafka = transport_factory("kafka")
    assert isinstance(kafka, KafkaAdapter)
    assert not kafka.enabled


class FakeResponse:
    def __init__(self, status_code, body=None, text=""):
        self.status_code = status_code
        self.ok = status_code < 400
        self.reason = "OK" if self.ok else "ERR"
        self._body = body
        self.content = b"{}" if body is not None else b""
        self.text = text

    def json(self):
        return self._body


def test_http_adapter_posts_event(monkeypatch):
    calls = []

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append((url, json, headers))
        return FakeResponse(202, {"accepted": True})

    monkeypatch.setattr(transport_http.requests, "post", fake_post)
    adapter = HTTPAdapter("http://indexer", token="t0k")

    res = adapter.publish("soulreg.mint", {"name": "Mint"})

    assert res == {"accepted": True}
    url, body, headers = calls[0]
    assert url == "http://indexer/events/soulreg.mint"
    assert body == {"name": "Mint"}
    assert headers["Authorization"] == "Bearer t0k"


@pytest.mark.parametrize("status,error", [
    (503, TransportTransientError),
    (400, TransportPermanentError),
])
def test_http_adapter_error_classes(monkeypatch, status, error):
    monkeypatch.setattr(
        transport_http.requests, "post",
        lambda *a, **kw: FakeResponse(status, text="nope"),
    )
    with pytest.raises(error):
        HTTPAdapter("http://indexer").publish("soulreg.burn", {"name": "Burn"})


def test_http_adapter_connection_error_is_transient(monkeypatch):
    def boom(*a, **kw):
        raise transport_http.requests.ConnectionError("refused")

    monkeypatch.setattr(transport_http.requests, "post", boom)
    with pytest.raises(TransportTransientError):
        HTTPAdapter("http://indexer").publish("soulreg.burn", {})


def test_kafka_disabled_skips(caplog):
    caplog.set_level(logging.INFO, logger="SoulReg.Transport.Kafka")
    adapter = KafkaAdapter(enabled=False)
    assert adapter.publish("soulreg.mint", {"name": "Mint"}) is None
    assert "KAFKA-SKIP" in caplog.text


def test_kafka_publishes_through_producer(caplog):
    class FakeProducer:
        def __init__(self):
            self.sent = []

        def send(self, topic, value=None, key=None, headers=None):
            self.sent.append((topic, value, key, headers))

        def flush(self, timeout=None):
            pass

    adapter = KafkaAdapter(enabled=False)
    adapter.enabled = True
    adapter._producer = FakeProducer()

    adapter.publish("soulreg.mint", {"name": "Mint"}, headers={"v": "1"}, key="0xa1")

    topic, value, key, headers = adapter._producer.sent[0]
    assert topic == "soulreg.mint"
    assert value == b'{"name": "Mint"}'
    assert key == b"0xa1"
    assert headers == [("v", b"1")]
