"""
HTTP transport used by the query composer.

Talks to the catalogue API with ``httpx.AsyncClient``. A non-2xx
answer, a network failure or a malformed body raises
``CatalogRequestError`` carrying a message fit for display. There is no
retry and no timeout handling beyond what httpx itself enforces.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..catalog.schemas import CatalogPage, PublisherList, Recommendations

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

CATALOG_ERROR = "데이터를 불러오는 데 실패했습니다."
RANDOM_ERROR = "추천 도서를 불러오는 데 실패했습니다."


class CatalogRequestError(Exception):
    pass


class HttpCatalogTransport:
    """Async client for ``/catalog``, ``/catalog/random`` and ``/catalog/publishers``."""

    def __init__(self, base_url: str, client: Optional[httpx.AsyncClient] = None) -> None:
        self._client = client or httpx.AsyncClient(base_url=base_url)

    async def _get_json(self, path: str, params: Dict[str, str], message: str) -> dict:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            logger.error("Request to %s failed: %s", path, exc)
            raise CatalogRequestError(message) from exc
        if response.is_error:
            logger.error("Request to %s returned status %s", path, response.status_code)
            raise CatalogRequestError(message)
        try:
            return response.json()
        except ValueError as exc:
            logger.error("Request to %s returned a non-JSON body", path)
            raise CatalogRequestError(message) from exc

    def _parse(self, model: Type[M], data: dict, path: str, message: str) -> M:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            logger.error("Unexpected payload from %s: %s", path, exc)
            raise CatalogRequestError(message) from exc

    async def fetch_catalog(self, params: Dict[str, str]) -> CatalogPage:
        data = await self._get_json("/catalog", params, CATALOG_ERROR)
        return self._parse(CatalogPage, data, "/catalog", CATALOG_ERROR)

    async def fetch_random(self, count: int) -> Recommendations:
        data = await self._get_json("/catalog/random", {"count": str(count)}, RANDOM_ERROR)
        return self._parse(Recommendations, data, "/catalog/random", RANDOM_ERROR)

    async def fetch_publishers(self) -> List[str]:
        data = await self._get_json("/catalog/publishers", {}, CATALOG_ERROR)
        return self._parse(PublisherList, data, "/catalog/publishers", CATALOG_ERROR).publishers

    async def aclose(self) -> None:
        await self._client.aclose()
