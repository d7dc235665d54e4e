import logging
from typing import Any, Optional

import aiohttp
from pydantic import ValidationError

from .models import (
    CapacityExceeded,
    CreateRoomResponse,
    ProvisioningOutcome,
    Success,
    TransportFailure,
)

logger = logging.getLogger("voice-client")


def _detail_message(detail: Any) -> Optional[str]:
    if isinstance(detail, dict):
        message = detail.get("message")
        return str(message) if message is not None else None
    if detail is not None:
        return str(detail)
    return None


class ProvisioningClient:
    """HTTP client for the room/agent provisioning backend.

    Calls are made once; there are no retries. Every failure is collapsed into
    a ProvisioningOutcome so callers never handle transport exceptions.
    """

    def __init__(
        self,
        base_url: str,
        auth_token: Optional[str] = None,
        *,
        aiohttp_session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        if not base_url.endswith("/"):
            base_url += "/"
        self._base_url = base_url
        self._auth_token = auth_token
        self._session = aiohttp_session
        self._owns_session = aiohttp_session is None

    @property
    def base_url(self) -> str:
        return self._base_url

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._auth_token or ''}",
        }

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def create_room(self) -> ProvisioningOutcome:
        url = f"{self._base_url}create_room"
        session = self._ensure_session()
        try:
            async with session.post(url, json={}, headers=self._headers()) as resp:
                status = resp.status
                body = await resp.json(content_type=None)
        except (aiohttp.ClientError, ValueError) as exc:
            logger.error("create_room request to %s failed: %s", url, exc)
            return TransportFailure(reason=str(exc))

        if not isinstance(body, dict):
            logger.error("create_room returned status=%s with non-object body", status)
            return TransportFailure(reason=f"unexpected body (status {status})")

        if body.get("error"):
            detail = _detail_message(body.get("detail"))
            logger.warning(
                "create_room reported error=%r status=%s detail=%s", body["error"], status, detail
            )
            return CapacityExceeded(detail=detail)

        try:
            parsed = CreateRoomResponse.model_validate(body)
        except ValidationError as exc:
            logger.error("create_room returned status=%s with malformed result: %s", status, exc)
            return TransportFailure(reason=f"malformed result (status {status})")

        if status >= 400 or parsed.result is None:
            logger.error(
                "create_room failed status=%s detail=%s", status, _detail_message(parsed.detail)
            )
            return TransportFailure(reason=f"status {status}")

        logger.info("create_room ok url=%s", parsed.result.url)
        return Success(url=parsed.result.url, token=parsed.result.token)

    async def start_bot(self, room_url: str, token: str) -> None:
        """Ask the backend to start an agent in the room.

        Raises on transport errors and non-2xx responses; the orchestrator runs
        this in the background and only logs the failure.
        """
        url = f"{self._base_url}start_bot"
        session = self._ensure_session()
        async with session.post(
            url,
            json={"room_url": room_url, "token": token},
            headers=self._headers(),
        ) as resp:
            resp.raise_for_status()
        logger.info("start_bot accepted for %s", room_url)
