# supergains/services/webhook_client.py
import hashlib
import hmac
import json
import time
from datetime import datetime, timezone

import requests
from requests import RequestException

from supergains.utils.logging import get_logger
from supergains.utils.retry import http_retry
from supergains.utils.settings import WEBHOOK_SECRET, WEBHOOK_TIMEOUT_SECONDS, WEBHOOK_URLS

logger = get_logger(__name__)

USER_AGENT = "SuperGains-Webhook/1.0"


def _dumps(data) -> str:
    return json.dumps(data, separators=(",", ":"), sort_keys=True, default=str)


def sign_payload(secret: str, timestamp: int, data: dict) -> str:
    message = f"{timestamp}.{_dumps(data)}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def verify_signature(secret: str, signature: str, timestamp: int, data: dict) -> bool:
    """Receiver-side check, for consumers validating X-Webhook-Signature."""
    return hmac.compare_digest(sign_payload(secret, timestamp, data), signature)


class WebhookClient:
    """
    Delivers `{"event", "timestamp", "data"}` to every configured endpoint.
    Receivers verify X-Webhook-Signature = HMAC-SHA256(secret, "<ts>.<data json>").
    """

    def __init__(
        self,
        urls: list[str] | None = None,
        secret: str | None = None,
        timeout: int | None = None,
    ):
        self.urls = list(WEBHOOK_URLS if urls is None else urls)
        self.secret = WEBHOOK_SECRET if secret is None else secret
        self.timeout = timeout or WEBHOOK_TIMEOUT_SECONDS

    @http_retry()
    def _post(self, url: str, body: str, headers: dict) -> requests.Response:
        logger.info(f"WebhookClient POST {url}")
        resp = requests.post(url, data=body, headers=headers, timeout=self.timeout, allow_redirects=False)
        resp.raise_for_status()
        return resp

    def send_event(self, event: str, data: dict) -> dict[str, bool]:
        timestamp = int(time.time() * 1000)
        body = _dumps(
            {
                "event": event,
                "timestamp": datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc).isoformat(),
                "data": data,
            }
        )
        headers = {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
            "X-Webhook-Event": event,
            "X-Webhook-Timestamp": str(timestamp),
            "X-Webhook-Signature": sign_payload(self.secret, timestamp, data),
        }

        results = {}
        for url in self.urls:
            try:
                self._post(url, body, headers)
                results[url] = True
            except RequestException as e:
                logger.error(f"Webhook {event} to {url} failed: {e}")
                results[url] = False
        return results
