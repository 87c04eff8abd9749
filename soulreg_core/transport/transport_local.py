# soulreg_core/transport/transport_local.py
from typing import Callable, Dict, List
from soulreg_core.logger import get_logger
from soulreg_core.transport.transport_base import BaseTransport

log = get_logger("SoulReg.Transport.Local")


class LocalAdapter(BaseTransport):
    """In-process loopback: handlers run synchronously on publish."""

    name = "local"

    def __init__(self):
        self.handlers: Dict[str, List[Callable[[dict], None]]] = {}
        self.published: List[tuple] = []

    def publish(self, topic, payload, headers=None, key=None):
        message = self.to_dict(payload)
        self.published.append((topic, message))
        log.info(f"[LOCAL PUB] topic={topic}")
        for handler in self.handlers.get(topic, []):
            handler(message)

    def subscribe(self, topic, handler):
        self.handlers.setdefault(topic, []).append(handler)
        log.info(f"[LOCAL SUB] topic={topic}")
