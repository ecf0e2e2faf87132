"""Webhook delivery client using aiohttp."""

import asyncio
import json
import sys
from typing import Awaitable, Callable, Dict, Optional

import aiohttp

from discord_relay.config import REQUEST_TIMEOUT_SECONDS, SHARED_SECRET_HEADER, AppConfig
from discord_relay.domain.models import OutboundPayload
from discord_relay.domain.retry import RetryPolicy, RetryState
from discord_relay.ports.outbound import DeliveryResult, DeliveryStatus


def _log(msg: str):
    print(msg, file=sys.stderr)


class WebhookClient:
    """Posts payloads to the downstream endpoint with capped linear backoff.

    No idempotency key is attached, so a retried POST is indistinguishable
    from the first one and the receiver must tolerate duplicates.
    """

    def __init__(
        self,
        url: str,
        shared_secret: str,
        max_retries: int = 3,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.url = url
        self._shared_secret = shared_secret
        self.policy = RetryPolicy(max_retries=max_retries)
        self._timeout = timeout
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: AppConfig) -> "WebhookClient":
        return cls(config.webhook_url, config.shared_secret, max_retries=config.max_retries)

    @property
    def headers(self) -> Dict[str, str]:
        return {
            SHARED_SECRET_HEADER: self._shared_secret,
            "Content-Type": "application/json",
        }

    async def _attempt(self, session: aiohttp.ClientSession, body: str) -> Optional[str]:
        """One POST. Returns None on 2xx, else a short error description."""
        try:
            async with session.post(self.url, data=body, headers=self.headers) as resp:
                if 200 <= resp.status < 300:
                    return None
                return f"HTTP {resp.status}"
        except asyncio.TimeoutError:
            return f"timeout after {self._timeout}s"
        except aiohttp.ClientError as e:
            return str(e) or type(e).__name__

    async def deliver(self, payload: OutboundPayload) -> DeliveryResult:
        body = json.dumps(payload.to_dict())
        total = self.policy.total_attempts
        timeout = aiohttp.ClientTimeout(total=self._timeout)
        last_error: Optional[str] = None
        attempt = 0

        async with aiohttp.ClientSession(timeout=timeout) as session:
            while True:
                last_error = await self._attempt(session, body)
                state = self.policy.next_state(attempt, succeeded=last_error is None)

                if state is RetryState.DELIVERED:
                    return DeliveryResult(DeliveryStatus.DELIVERED, attempts=attempt + 1)

                _log(f"[relay] POST failed (attempt {attempt + 1}/{total}): {last_error}")
                if state is RetryState.PERMANENT_FAILURE:
                    break

                await self._sleep(self.policy.delay_seconds(attempt))
                attempt += 1

        _log(f"[relay] POST permanently failed: {last_error}")
        return DeliveryResult(
            DeliveryStatus.PERMANENT_FAILURE, attempts=attempt + 1, last_error=last_error
        )
