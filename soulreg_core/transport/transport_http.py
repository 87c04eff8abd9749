# soulreg_core/transport/transport_http.py
import requests
from soulreg_core.logger import get_logger
from soulreg_core.transport.transport_base import (
    BaseTransport, TransportPermanentError, TransportTransientError,
)

log = get_logger("SoulReg.Transport.HTTP")


class HTTPAdapter(BaseTransport):
    """
    HTTP transport adapter posting registry events to an indexer webhook.

    Features:
    - POST {base_url}/events/{topic} with the event as JSON body.
    - Optional Bearer token (SOULREG_INDEXER_TOKEN) for the indexer.
    - 5xx and connection failures are transient, 4xx are permanent.
    """

    name = "http"

    def __init__(self, base_url: str, token: str = None, timeout: float = 5):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    def publish(self, topic, payload, headers=None, key=None):
        url = f"{self.base_url}/events/{topic}"
        req_headers = {"Content-Type": "application/json"}
        if self.token:
            req_headers["Authorization"] = f"Bearer {self.token}"
        req_headers.update(headers or {})

        log.debug(f"[HTTP PUB] → {url}")
        try:
            res = requests.post(url, json=self.to_dict(payload), headers=req_headers, timeout=self.timeout)
        except requests.RequestException as e:
            log.error(f"[HTTP PUB] {url} failed: {e}")
            raise TransportTransientError(str(e)) from e

        if res.ok:
            log.info(f"[HTTP PUB] {res.status_code} {res.reason}")
            return res.json() if res.content else {}
        log.error(f"[HTTP PUB] {res.status_code}: {res.text}")
        if res.status_code >= 500:
            raise TransportTransientError(f"{res.status_code}: {res.text}")
        raise TransportPermanentError(f"{res.status_code}: {res.text}")

    def subscribe(self, topic, handler):
        raise TransportPermanentError("HTTP transport is egress only")
