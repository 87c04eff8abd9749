# soulreg_core/transport/transport_kafka.py
import logging
from typing import Optional, Any
from soulreg_core.transport.transport_base import BaseTransport, TransportTransientError

log = logging.getLogger("SoulReg.Transport.Kafka")


class KafkaAdapter(BaseTransport):
    """
    Event egress over Kafka.

    • Producer-only
    • Topic == event topic (soulreg.mint, soulreg.burn, ...)
    • Key == owner key when known, so events for one owner stay ordered
    """

    name = "kafka"

    def __init__(self, brokers="localhost:9092", enabled=True):
        self.brokers = brokers
        self.enabled = enabled
        self._producer = None

        if not self.enabled:
            log.warning("[KAFKA] disabled")
            return

        try:
            from kafka import KafkaProducer

            self._producer = KafkaProducer(
                bootstrap_servers=self.brokers,
                linger_ms=5,
                acks="all",
            )

            log.info(f"[KAFKA] connected brokers={self.brokers}")

        except Exception:
            log.exception("[KAFKA] init failed, disabling transport")
            self.enabled = False

    def publish(
        self,
        topic: str,
        payload: bytes | dict,
        headers=None,
        key: Optional[str] = None,
    ) -> Any:
        if not self.enabled:
            log.info(f"[KAFKA-SKIP] {topic}")
            return

        data = self.to_bytes(payload)

        log.info({
            "event": "registry_publish",
            "transport": "kafka",
            "topic": topic,
            "bytes": len(data),
        })

        try:
            self._producer.send(
                topic,
                value=data,
                key=key.encode("utf-8") if key else None,
                headers=[(k, v.encode("utf-8")) for k, v in (headers or {}).items()],
            )
            self._producer.flush(timeout=1.0)
            log.debug(f"[KAFKA PUB] topic={topic}")
        except Exception as e:
            log.exception(f"[KAFKA PUB ERROR] topic={topic}")
            raise TransportTransientError(str(e)) from e

    def close(self) -> None:
        if self._producer is not None:
            self._producer.close()
