"""HTTP client for the remote key-value record service.

Thin async wrapper over the `/v2/key-value-stores` REST endpoints. It does
no retrying: a failed request surfaces as `ServiceError` carrying the HTTP
status code (None for transport failures).
"""
from __future__ import annotations
from typing import Any, Dict, Optional, Union
from urllib.parse import quote
import logging

import httpx
from pydantic import ValidationError

from kvstore_lib.client.models import KeyListPage, Record, StoreInfo
from kvstore_lib.config import DEFAULT_API_BASE_URL
from kvstore_lib.errors import ServiceError

logger = logging.getLogger(__name__)

API_VERSION = "v2"
STORES_PATH = f"/{API_VERSION}/key-value-stores"


def _quote(segment: str) -> str:
    return quote(segment, safe="")


class RecordServiceClient:
    def __init__(
        self,
        token: str,
        *,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "RecordServiceClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, *, allow_not_found: bool = False, **kwargs) -> Optional[httpx.Response]:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise ServiceError(f"{method} {path} failed: {e}") from e
        if response.status_code == 404 and allow_not_found:
            return None
        if response.is_error:
            raise ServiceError(
                f"{method} {path} failed with status {response.status_code}: {self._error_message(response)}",
                status_code=response.status_code,
            )
        logger.debug("%s %s -> %s", method, path, response.status_code)
        return response

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        error = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        return response.reason_phrase

    @staticmethod
    def _data(response: httpx.Response) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as e:
            raise ServiceError("record service returned a non-JSON response", response.status_code) from e
        data = payload.get("data", payload) if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise ServiceError("record service returned an unexpected payload", response.status_code)
        return data

    async def get_store(self, store_id: str) -> Optional[StoreInfo]:
        response = await self._request("GET", f"{STORES_PATH}/{_quote(store_id)}", allow_not_found=True)
        if response is None:
            return None
        return self._parse(StoreInfo, self._data(response))

    async def get_or_create_store(self, name: str) -> StoreInfo:
        response = await self._request("POST", STORES_PATH, params={"name": name})
        assert response is not None
        return self._parse(StoreInfo, self._data(response))

    async def delete_store(self, store_id: str) -> None:
        await self._request("DELETE", f"{STORES_PATH}/{_quote(store_id)}")

    async def put_record(self, store_id: str, key: str, body: Union[bytes, str], content_type: str) -> None:
        content = body.encode("utf-8") if isinstance(body, str) else body
        await self._request(
            "PUT",
            f"{STORES_PATH}/{_quote(store_id)}/records/{_quote(key)}",
            content=content,
            headers={"Content-Type": content_type},
        )

    async def get_record(self, store_id: str, key: str) -> Optional[Record]:
        response = await self._request(
            "GET",
            f"{STORES_PATH}/{_quote(store_id)}/records/{_quote(key)}",
            allow_not_found=True,
        )
        if response is None:
            return None
        return Record(body=response.content, content_type=response.headers.get("content-type"))

    async def delete_record(self, store_id: str, key: str) -> None:
        # Deleting a record that does not exist is not an error.
        await self._request(
            "DELETE",
            f"{STORES_PATH}/{_quote(store_id)}/records/{_quote(key)}",
            allow_not_found=True,
        )

    async def list_keys(
        self,
        store_id: str,
        exclusive_start_key: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> KeyListPage:
        params: Dict[str, Any] = {}
        if exclusive_start_key is not None:
            params["exclusiveStartKey"] = exclusive_start_key
        if limit is not None:
            params["limit"] = limit
        response = await self._request("GET", f"{STORES_PATH}/{_quote(store_id)}/keys", params=params)
        assert response is not None
        return self._parse(KeyListPage, self._data(response))

    @staticmethod
    def _parse(model, data: Dict[str, Any]):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ServiceError(f"record service returned an invalid {model.__name__}: {e}") from e
