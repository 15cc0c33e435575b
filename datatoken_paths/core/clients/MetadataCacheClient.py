from __future__ import annotations

import json
from typing import Any, NotRequired, Required, TypedDict

import httpx
from loguru import logger

from datatoken_paths.core.clients.HttpClient import HttpClient
from datatoken_paths.core.config import CONFIG
from datatoken_paths.core.constants.networks import DEFAULT_METADATA_CACHE_URI

DID_PREFIX = "did:op:"
ASSETS_PATH = "/api/v1/aquarius/assets"
OWNER_ASSETS_PAGE_SIZE = 500


class SearchQuery(TypedDict):
    query: Required[dict[str, Any]]
    offset: NotRequired[int]
    page: NotRequired[int]
    sort: NotRequired[dict[str, int]]


class QueryResult(TypedDict):
    results: list[dict[str, Any]]
    page: int
    total_pages: int
    total_results: int


class ValidateMetadataResult(TypedDict):
    valid: bool
    errors: NotRequired[Any]


def did_to_id(did: str) -> str:
    """``did:op:abc`` -> ``abc``; bare ids pass through."""
    did = str(did)
    return did[len(DID_PREFIX) :] if did.startswith(DID_PREFIX) else did


def id_to_did(asset_id: str) -> str:
    return f"{DID_PREFIX}{did_to_id(asset_id)}"


def _transform_result(data: dict[str, Any] | None) -> QueryResult:
    data = data or {}
    return {
        "results": list(data.get("results") or []),
        "page": int(data.get("page") or 0),
        "total_pages": int(data.get("total_pages") or 0),
        "total_results": int(data.get("total_results") or 0),
    }


class MetadataCacheClient(HttpClient):
    """Client for the metadata cache service that stores and indexes asset DDOs."""

    def __init__(
        self,
        metadata_cache_uri: str | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ):
        super().__init__(client=client)
        uri = (
            metadata_cache_uri
            or CONFIG.get("metadata_cache_uri")
            or DEFAULT_METADATA_CACHE_URI
        )
        self.metadata_cache_uri = str(uri).rstrip("/")

    def get_uri(self) -> str:
        return self.metadata_cache_uri

    @property
    def _assets_url(self) -> str:
        return f"{self.metadata_cache_uri}{ASSETS_PATH}"

    def get_service_endpoint(self, did: str) -> str:
        return f"{self._assets_url}/ddo/{id_to_did(did)}"

    async def get_version_info(self) -> dict[str, Any]:
        resp = await self._request("GET", f"{self.metadata_cache_uri}/")
        return resp.json()

    async def query_metadata(self, query: SearchQuery) -> QueryResult:
        resp = await self._request(
            "POST", f"{self._assets_url}/ddo/query", content=json.dumps(query)
        )
        return _transform_result(resp.json())

    async def get_owner_assets(self, owner: str) -> QueryResult:
        query: SearchQuery = {
            "offset": OWNER_ASSETS_PAGE_SIZE,
            "page": 1,
            "query": {"query_string": {"query": f"(publicKey.owner:{owner})"}},
            "sort": {"created": -1},
        }
        return await self.query_metadata(query)

    async def store_ddo(self, ddo: dict[str, Any]) -> dict[str, Any]:
        resp = await self._request(
            "POST", f"{self._assets_url}/ddo", content=json.dumps(ddo)
        )
        return resp.json()

    async def encrypt_ddo(self, ddo: bytes | str | dict[str, Any]) -> str:
        """Encrypted DDO as the hex string returned by the service."""
        if isinstance(ddo, dict):
            ddo = json.dumps(ddo)
        body = ddo.encode() if isinstance(ddo, str) else bytes(ddo)
        resp = await self._request(
            "POST",
            f"{self._assets_url}/encryptashex",
            content=body,
            headers={"Content-Type": "application/octet-stream"},
        )
        return resp.text

    async def validate_metadata(self, metadata: dict[str, Any]) -> ValidateMetadataResult:
        # a full DDO carries an "@context"; bare metadata does not
        path = "validate-remote" if "@context" in metadata else "validate"
        resp = await self._request(
            "POST",
            f"{self.metadata_cache_uri}/api/v1/aquarius/{path}",
            content=json.dumps(metadata),
        )
        data = resp.json()
        if data is True:
            return {"valid": True}
        return {"valid": False, "errors": data}

    async def retrieve_ddo_by_url(self, url: str) -> dict[str, Any] | None:
        resp = await self._request("GET", url, raise_for_status=False)
        if resp.status_code == 404:
            logger.info(f"No DDO at {url}")
            return None
        resp.raise_for_status()
        return resp.json()

    async def retrieve_ddo(
        self, did: str, metadata_service_endpoint: str | None = None
    ) -> dict[str, Any] | None:
        return await self.retrieve_ddo_by_url(
            metadata_service_endpoint or self.get_service_endpoint(did)
        )

    async def transfer_ownership(
        self, did: str, new_owner: str, updated: str, signature: str
    ) -> str:
        resp = await self._request(
            "PUT",
            f"{self._assets_url}/ddo/owner/update/{id_to_did(did)}",
            content=json.dumps(
                {"updated": updated, "newOwner": new_owner, "signature": signature}
            ),
        )
        return resp.text

    async def retire(self, did: str, updated: str, signature: str) -> str:
        resp = await self._request(
            "DELETE",
            f"{self._assets_url}/ddo/{id_to_did(did)}",
            content=json.dumps({"updated": updated, "signature": signature}),
        )
        return resp.text
