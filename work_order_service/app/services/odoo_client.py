"""Minimal async Odoo client speaking JSON-RPC over httpx."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..config import Settings, settings

logger = logging.getLogger(__name__)


class OdooError(Exception):
    """Raised when Odoo rejects a call or cannot be reached."""

    def __init__(
        self,
        message: str,
        *,
        model: Optional[str] = None,
        method: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.model = model
        self.method = method
        self.data = data or {}


class OdooClient:
    def __init__(
        self,
        url: str,
        database: str,
        username: str,
        password: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.database = database
        self.username = username
        self.password = password
        self.uid: Optional[int] = None
        self._request_id = 0
        self._http_client = httpx.AsyncClient(base_url=url, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, config: Settings = settings, **kwargs) -> OdooClient:
        return cls(
            url=config.ODOO_URL,
            database=config.ODOO_DATABASE,
            username=config.ODOO_USERNAME,
            password=config.ODOO_PASSWORD,
            timeout=config.ODOO_TIMEOUT_SECONDS,
            **kwargs,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.database and self.username)

    async def __aenter__(self) -> OdooClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http_client.aclose()

    async def _call(self, service: str, method: str, *args: Any) -> Any:
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "method": "call",
            "params": {"service": service, "method": method, "args": list(args)},
            "id": self._request_id,
        }

        try:
            response = await self._http_client.post("/jsonrpc", json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as exc:
            raise OdooError(f"Odoo request failed: {exc}", method=method) from exc
        except ValueError as exc:
            raise OdooError(f"Odoo returned invalid JSON: {exc}", method=method) from exc

        error = body.get("error")
        if error:
            data = error.get("data") or {}
            message = data.get("message") or error.get("message") or "Odoo error"
            raise OdooError(message, method=method, data=data)

        return body.get("result")

    async def connect(self) -> int:
        uid = await self._call(
            "common", "authenticate", self.database, self.username, self.password, {}
        )
        if not uid:
            raise OdooError(f"Authentication failed for user {self.username}")
        self.uid = uid
        logger.debug("connected to odoo %s as uid %s", self.url, uid)
        return uid

    async def execute_kw(
        self,
        model: str,
        method: str,
        args: Sequence[Any],
        kwargs: Optional[Dict[str, Any]] = None,
    ) -> Any:
        if self.uid is None:
            await self.connect()
        try:
            return await self._call(
                "object",
                "execute_kw",
                self.database,
                self.uid,
                self.password,
                model,
                method,
                list(args),
                kwargs or {},
            )
        except OdooError as exc:
            exc.model = exc.model or model
            raise

    async def search(self, model: str, domain: List[Any], limit: Optional[int] = None) -> List[int]:
        kwargs = {"limit": limit} if limit else {}
        return await self.execute_kw(model, "search", [domain], kwargs)

    async def search_read(
        self,
        model: str,
        domain: Optional[List[Any]] = None,
        fields: Optional[List[str]] = None,
    ) -> List[Dict[str, Any]]:
        kwargs = {"fields": fields} if fields else {}
        return await self.execute_kw(model, "search_read", [domain or []], kwargs)

    async def create(self, model: str, values: Dict[str, Any]) -> int:
        return await self.execute_kw(model, "create", [values])

    async def update(self, model: str, record_id: int, values: Dict[str, Any]) -> bool:
        return await self.execute_kw(model, "write", [[record_id], values])


async def get_odoo_client():
    """FastAPI dependency yielding a client that is closed after the request."""
    async with OdooClient.from_settings() as client:
        yield client
