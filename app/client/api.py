"""HTTP client for the alphabet trainer backend.

Each method is one boundary operation. Network errors and unexpected
responses surface as TransportFailure; a 404 carrying a ``not_found`` detail
becomes NotFoundError and a 422 becomes ValidationFailure, so callers can tell
a missing alphabet apart from an unreachable server.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from app.core.config import settings
from app.core.errors import NotFoundError, TransportFailure, ValidationFailure
from app.core.logging import get_logger
from app.modules.alphabets.models import (
    AlphabetRead,
    AlphabetType,
    LetterRead,
    PracticeSessionRead,
    SessionType,
)


logger = get_logger(__name__)

_UNSET: Any = object()

M = TypeVar("M", bound=BaseModel)


class AlphabetApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        version: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = (base_url or settings.client.api_base_url).rstrip("/")
        self.version = version or settings.app.version
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.client.timeout_seconds,
        )
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "AlphabetApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _path(self, path: str) -> str:
        return f"/{self.version}{path}"

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        url = self._path(path)
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise TransportFailure("Request timed out", timed_out=True) from e
        except httpx.HTTPError as e:
            raise TransportFailure(f"HTTP error calling {method} {url}: {e}") from e
        logger.debug("%s %s -> %s", method, url, response.status_code)

        if response.status_code == 404:
            detail = _detail(response)
            if isinstance(detail, dict) and detail.get("error") == "not_found":
                raise NotFoundError(detail.get("resource", "resource"), detail.get("id"))
        if response.status_code == 422:
            raise ValidationFailure(str(_detail(response)))
        if response.is_error:
            raise TransportFailure(
                f"{method} {url} failed with status {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise TransportFailure(f"Invalid JSON from {method} {url}") from e

    async def list_alphabets(self) -> list[AlphabetRead]:
        data = await self._request("GET", "/alphabets")
        return _parse_many(AlphabetRead, data)

    async def get_alphabet_by_type(
        self, alphabet_type: AlphabetType | str
    ) -> Optional[AlphabetRead]:
        value = AlphabetType(alphabet_type).value
        data = await self._request("GET", f"/alphabets/by-type/{value}")
        return _parse_optional(AlphabetRead, data)

    async def list_letters_by_alphabet(self, alphabet_id: int) -> list[LetterRead]:
        data = await self._request("GET", f"/alphabets/{alphabet_id}/letters")
        return _parse_many(LetterRead, data)

    async def get_letter_by_id(self, letter_id: int) -> Optional[LetterRead]:
        data = await self._request("GET", f"/letters/{letter_id}")
        return _parse_optional(LetterRead, data)

    async def sample_letters(self, alphabet_id: int) -> list[LetterRead]:
        data = await self._request("GET", f"/alphabets/{alphabet_id}/letters/random")
        return _parse_many(LetterRead, data)

    async def create_session(
        self,
        alphabet_id: int,
        session_type: SessionType | str,
        total_cards: int,
    ) -> PracticeSessionRead:
        payload = {
            "alphabet_id": alphabet_id,
            "session_type": SessionType(session_type).value,
            "total_cards": total_cards,
        }
        data = await self._request("POST", "/practice-sessions", json=payload)
        return _parse_one(PracticeSessionRead, data)

    async def update_session(
        self,
        session_id: int,
        *,
        completed_cards: Optional[int] = _UNSET,
        correct_answers: Optional[int] = _UNSET,
        completed_at: Optional[datetime] = _UNSET,
    ) -> Optional[PracticeSessionRead]:
        """Send only the keyword arguments that were given.

        Passing ``completed_at=None`` clears it on the server; leaving it out
        keeps the stored value.
        """
        payload: dict[str, Any] = {}
        if completed_cards is not _UNSET:
            payload["completed_cards"] = completed_cards
        if correct_answers is not _UNSET:
            payload["correct_answers"] = correct_answers
        if completed_at is not _UNSET:
            payload["completed_at"] = (
                completed_at.isoformat() if completed_at is not None else None
            )
        data = await self._request(
            "PATCH", f"/practice-sessions/{session_id}", json=payload
        )
        return _parse_optional(PracticeSessionRead, data)


def _detail(response: httpx.Response) -> Any:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and "detail" in body:
        return body["detail"]
    return body


def _parse_one(model: type[M], data: Any) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise TransportFailure(f"Malformed {model.__name__} in response: {e}") from e


def _parse_optional(model: type[M], data: Any) -> Optional[M]:
    return _parse_one(model, data) if data is not None else None


def _parse_many(model: type[M], data: Any) -> list[M]:
    if not isinstance(data, list):
        raise TransportFailure(f"Expected a list of {model.__name__}, got {type(data).__name__}")
    return [_parse_one(model, item) for item in data]
