# soulreg_core/transport/__init__.py
import os
from soulreg_core.transport.transport_base import (
    BaseTransport, TransportError, TransportTransientError, TransportPermanentError,
)
from soulreg_core.transport.transport_local import LocalAdapter
from soulreg_core.transport.transport_http import HTTPAdapter
from soulreg_core.transport.transport_kafka import KafkaAdapter


def transport_factory(mode: str = None) -> BaseTransport:
    """
    mode (or SOULREG_TRANSPORT):
      - "local" → in-process loopback (default)
      - "http"  → POST to the indexer webhook at SOULREG_INDEXER_URL
      - "kafka" → produce to KAFKA_BROKERS
    """
    mode = (mode or os.getenv("SOULREG_TRANSPORT", "local")).lower()

    if mode == "kafka":
        return KafkaAdapter(
            brokers=os.getenv("KAFKA_BROKERS", "localhost:9092"),
            enabled=os.getenv("KAFKA_ENABLED", "1") == "1",
        )

    if mode == "http":
        return HTTPAdapter(
            os.getenv("SOULREG_INDEXER_URL", "http://localhost:8080"),
            token=os.getenv("SOULREG_INDEXER_TOKEN"),
        )

    return LocalAdapter()


__all__ = [
    "BaseTransport",
    "TransportError",
    "TransportTransientError",
    "TransportPermanentError",
    "LocalAdapter",
    "HTTPAdapter",
    "KafkaAdapter",
    "transport_factory",
]
