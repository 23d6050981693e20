"""Character mail delivery bridge used for item rewards."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol
from uuid import UUID

import httpx
from loguru import logger

from gamepass_api.core.settings import settings


class CharacterDeliveryError(RuntimeError):
    """Raised when the mail bridge cannot be reached or answers with an error."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


@dataclass(frozen=True)
class DeliveryReceipt:
    success: bool
    message: str | None = None
    reference: str | None = None


class CharacterDeliveryGateway(Protocol):
    """Contract the claim processor needs from the in-game mail system."""

    async def verify_character(self, user_id: UUID, character_id: int) -> bool:
        ...

    async def deliver_item(
        self,
        character_id: int,
        item_id: int,
        quantity: int,
        *,
        reference: str,
        title: str | None = None,
    ) -> DeliveryReceipt:
        ...


def _parse_response_body(response: httpx.Response) -> Mapping[str, Any]:
    content_type = response.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            parsed = response.json()
        except ValueError:
            return {"text": response.text}
        if isinstance(parsed, Mapping):
            return parsed
        return {"data": parsed}
    return {"text": response.text}


class HttpCharacterDeliveryClient:
    """httpx client for the game server's mail bridge.

    ``GET  {base}/characters/{id}?account={user_id}`` answers ``{"owned": bool}``;
    ``POST {base}/mail`` enqueues a mail carrying the item and answers
    ``{"success": bool, "mailId": ...}``.
    """

    def __init__(
        self,
        base_url: str | None,
        *,
        api_key: str | None = None,
        sender_id: int = 0,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = (base_url or "").rstrip("/")
        self._api_key = api_key
        self._sender_id = sender_id
        self._timeout = timeout
        self._client = http_client

    @classmethod
    def from_settings(cls, http_client: httpx.AsyncClient | None = None) -> "HttpCharacterDeliveryClient":
        return cls(
            settings.character_delivery_base_url,
            api_key=settings.character_delivery_api_key,
            sender_id=settings.character_delivery_sender_id,
            timeout=settings.character_delivery_timeout_seconds,
            http_client=http_client,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._base_url)

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["X-API-Key"] = self._api_key
        return headers

    async def _request(self, method: str, path: str, **kwargs: Any) -> Mapping[str, Any]:
        if not self.is_configured:
            raise CharacterDeliveryError("Character delivery endpoint is not configured")

        url = f"{self._base_url}{path}"
        client = self._client or httpx.AsyncClient(timeout=self._timeout)
        owns_client = self._client is None
        try:
            response = await client.request(method, url, headers=self._headers(), **kwargs)
            response.raise_for_status()
            return _parse_response_body(response)
        except httpx.HTTPError as exc:
            raise CharacterDeliveryError(str(exc), url=url) from exc
        finally:
            if owns_client:
                await client.aclose()

    async def verify_character(self, user_id: UUID, character_id: int) -> bool:
        try:
            payload = await self._request(
                "GET",
                f"/characters/{character_id}",
                params={"account": str(user_id)},
            )
        except CharacterDeliveryError as error:
            logger.warning(
                "Character ownership check failed",
                character_id=character_id,
                error=str(error),
            )
            return False
        return bool(payload.get("owned"))

    async def deliver_item(
        self,
        character_id: int,
        item_id: int,
        quantity: int,
        *,
        reference: str,
        title: str | None = None,
    ) -> DeliveryReceipt:
        body = {
            "senderId": self._sender_id,
            "characterId": character_id,
            "itemId": item_id,
            "quantity": quantity,
            "reference": reference,
            "title": title or "Game Pass Reward",
        }
        try:
            payload = await self._request("POST", "/mail", json=body)
        except CharacterDeliveryError as error:
            return DeliveryReceipt(success=False, message=str(error))

        if not payload.get("success", False):
            message = payload.get("message") or payload.get("error") or "Mail bridge rejected delivery"
            return DeliveryReceipt(success=False, message=str(message))

        mail_id = payload.get("mailId")
        return DeliveryReceipt(
            success=True,
            message=payload.get("message"),
            reference=str(mail_id) if mail_id is not None else reference,
        )


__all__ = [
    "CharacterDeliveryError",
    "CharacterDeliveryGateway",
    "DeliveryReceipt",
    "HttpCharacterDeliveryClient",
]
