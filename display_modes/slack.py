"""
Slack status notifier.

Sets the user's status text, emoji and expiration through
users.profile.set, and presence through users.setPresence. API failures
are logged and returned as StatusResult values, never raised.
"""

import asyncio
import logging
import random
import time
from typing import Any, Awaitable, Callable, Dict, Optional

import aiohttp

from .models import Presence, SlackConfig, StatusResult, StatusSpec
from .retry import RetryPolicy

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[bool], Any]


class SlackNotifier:
    """Posts status and presence updates to the Slack Web API."""

    def __init__(
        self,
        config: SlackConfig,
        scheduler,
        notifier=None,
        retry: Optional[RetryPolicy] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize Slack notifier.

        Args:
            config: Slack section of the configuration
            scheduler: Scheduler used for fire-and-forget requests
            notifier: Desktop Notifier for the retry-exhausted message
            retry: Retry policy for set_status_with_retry
            rng: Random source for randomized text/emoji
            clock: Wall clock returning epoch seconds
            sleep: Awaitable sleep between retries
        """
        self.config = config
        self.scheduler = scheduler
        self.notifier = notifier
        self.retry = retry or RetryPolicy()
        self.rng = rng or random.Random()
        self.clock = clock
        self.sleep = sleep
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def enabled(self) -> bool:
        return self.config.enabled and self.config.has_token

    def _skip_reason(self) -> Optional[str]:
        if not self.config.enabled:
            return "Slack integration disabled"
        if not self.config.has_token:
            return "Slack token not configured"
        return None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _post(self, method: str, payload: Dict[str, Any]) -> StatusResult:
        """POST a JSON payload to a Web API method."""
        url = f"{self.config.api_base.rstrip('/')}/{method}"
        headers = {
            "Authorization": f"Bearer {self.config.token.get_secret_value()}",
            "Content-Type": "application/json; charset=utf-8",
        }

        try:
            session = await self._get_session()
            async with session.post(url, json=payload, headers=headers) as response:
                if not 200 <= response.status < 300:
                    return StatusResult(ok=False, error=f"HTTP {response.status}")
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            return StatusResult(ok=False, error=str(e) or type(e).__name__)
        except ValueError as e:
            return StatusResult(ok=False, error=f"invalid response: {e}")

        if not data.get("ok"):
            return StatusResult(ok=False, error=data.get("error", "unknown_error"))
        return StatusResult(ok=True)

    def build_profile(self, spec: StatusSpec, expiration_minutes: Optional[int] = None) -> Dict[str, Any]:
        """
        Resolve a status spec into a users.profile.set payload.

        Randomized text and emoji are resolved on every call. The expiration
        offset is turned into absolute epoch seconds from the clock now.

        Args:
            spec: Status to send
            expiration_minutes: Overrides spec.expiration_minutes when given
        """
        profile: Dict[str, Any] = {
            "status_text": spec.text.resolve(self.rng),
            "status_emoji": spec.emoji.resolve(self.rng),
        }
        minutes = expiration_minutes if expiration_minutes is not None else spec.expiration_minutes
        if minutes:
            profile["status_expiration"] = int(self.clock() + minutes * 60)
        return {"profile": profile}

    async def _send_profile(self, spec: StatusSpec, expiration_minutes: Optional[int]) -> StatusResult:
        payload = self.build_profile(spec, expiration_minutes)
        result = await self._post("users.profile.set", payload)
        if result.ok:
            profile = payload["profile"]
            logger.info(f"Slack status set: {profile['status_emoji']} {profile['status_text']}")
        else:
            logger.warning(f"Slack status update failed: {result.error}")
        return result

    async def set_presence(self, presence: Presence) -> StatusResult:
        """Set presence to auto or away."""
        reason = self._skip_reason()
        if reason:
            logger.info(f"{reason}, presence update skipped")
            return StatusResult(ok=True)

        result = await self._post("users.setPresence", {"presence": presence.value})
        if result.ok:
            logger.info(f"Slack presence set: {presence.value}")
        else:
            logger.warning(f"Slack presence update failed: {result.error}")
        return result

    async def set_status(
        self,
        spec: Optional[StatusSpec],
        expiration_minutes: Optional[int] = None,
    ) -> StatusResult:
        """
        Set status, then presence if the spec names one.

        The presence request is independent of the status outcome.

        Returns:
            Result of the status request
        """
        if spec is None:
            logger.debug("No Slack status configured for this mode")
            return StatusResult(ok=True)

        reason = self._skip_reason()
        if reason:
            logger.info(f"{reason}, status update skipped")
            return StatusResult(ok=True)

        result = await self._send_profile(spec, expiration_minutes)
        if spec.presence is not None:
            await self.set_presence(spec.presence)
        return result

    def set_status_async(self, spec: Optional[StatusSpec], expiration_minutes: Optional[int] = None) -> None:
        """Fire-and-forget variant of set_status."""
        if spec is None:
            return
        self.scheduler.spawn(self.set_status, spec, expiration_minutes)

    async def set_status_with_retry(
        self,
        spec: Optional[StatusSpec],
        on_complete: Optional[CompletionCallback] = None,
        expiration_minutes: Optional[int] = None,
    ) -> StatusResult:
        """
        Set status with bounded retries.

        Presence is sent once the status succeeds. on_complete(False) runs
        only after the final attempt fails, together with a desktop
        notification. A disabled integration counts as success.
        """
        reason = self._skip_reason() if spec is not None else "No status configured"
        if reason:
            logger.info(f"{reason}, status update skipped")
            result = StatusResult(ok=True, attempts=0)
        else:
            result = await self.retry.run(
                lambda: self._send_profile(spec, expiration_minutes),
                sleep=self.sleep,
                label="Slack status update",
            )
            if result.ok and spec.presence is not None:
                await self.set_presence(spec.presence)
            elif not result.ok and self.notifier is not None:
                await self.notifier.send(
                    "Slack Update Failed",
                    f"Status update failed after {self.retry.max_attempts} attempts",
                    urgency="critical",
                )

        if on_complete is not None:
            outcome = on_complete(result.ok)
            if asyncio.iscoroutine(outcome):
                await outcome
        return result
