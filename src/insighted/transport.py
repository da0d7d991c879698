from __future__ import annotations

from typing import Any

import httpx

from .common import console
from .errors import TransportError
from .outbox import OutboxItem
from .sync import DeliveryOutcome, DeliveryResult


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase


class HttpTransport:
    """Thin wrapper around httpx for posting school profiles."""

    def __init__(
        self,
        connectivity_url: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.connectivity_url = connectivity_url
        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout, connect=min(timeout, 5.0)),
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def is_online(self) -> bool:
        """Any HTTP answer from the connectivity URL counts as being online."""
        try:
            self._client.head(self.connectivity_url)
        except httpx.TransportError:
            return False
        return True

    def submit(self, url: str, payload: dict[str, Any]) -> str:
        """POST `payload` to `url` and return the server's acknowledgement.

        Raises:
            TransportError: Connection failure, timeout or a non-2xx reply.
        """
        try:
            response = self._client.post(url, json=payload)
        except httpx.TransportError as exc:
            raise TransportError(f"Connection error: {exc}") from exc
        if not response.is_success:
            raise TransportError(
                f"Failed: {_error_message(response)}", status_code=response.status_code
            )
        console.log(f"[green]✓ Saved[/green] school {payload.get('schoolId')}")
        try:
            body = response.json()
        except ValueError:
            return ""
        return str(body.get("message", "")) if isinstance(body, dict) else ""

    def deliver(self, item: OutboxItem) -> DeliveryResult:
        try:
            message = self.submit(item.destination, item.payload)
        except TransportError as exc:
            if exc.status_code is None:
                return DeliveryResult(DeliveryOutcome.NETWORK_ERROR, str(exc))
            return DeliveryResult(DeliveryOutcome.REJECTED, str(exc))
        return DeliveryResult(DeliveryOutcome.SUCCESS, message)

    def close(self) -> None:
        self._client.close()
