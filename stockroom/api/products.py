# stockroom/api/products.py
"""HTTP client for the remote products API."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import requests
from requests.exceptions import RequestException

from stockroom.config import BaseConfig
from stockroom.errors import ApiError, NetworkError


class ProductsApi:
    """Thin wrapper around ``requests.Session`` for ``/products``.

    Every call either returns decoded JSON or raises ``NetworkError`` /
    ``ApiError``.  There are no retries; the user re-triggers the action.
    """

    def __init__(
        self,
        base_url: str = BaseConfig.INVENTORY_API_URL,
        timeout: float = BaseConfig.INVENTORY_API_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def close(self) -> None:
        self.session.close()

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        start = time.monotonic()
        try:
            r = self.session.request(
                method, url, params=params, json=json, timeout=self.timeout
            )
        except RequestException as e:
            logging.warning("API %s %s network error: %s", method, url, e)
            raise NetworkError(str(e)) from e
        latency = (time.monotonic() - start) * 1000
        logging.info("API %s %s %s %s %.1fms", method, url, params, r.status_code, latency)

        if not 200 <= r.status_code < 300:
            raise ApiError(r.status_code, _error_message(r))
        if r.status_code == 204 or not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise ApiError(None, "Malformed response from server") from e

    def list_products(self, params: Dict[str, Any]) -> Dict[str, Any]:
        data = self._request("GET", "/products", params=params)
        if not isinstance(data, dict):
            raise ApiError(None, "Malformed response from server")
        return data

    def list_categories(self) -> List[str]:
        data = self._request("GET", "/products/categories")
        if not isinstance(data, list):
            raise ApiError(None, "Malformed response from server")
        return [str(c) for c in data if c]

    def create_product(self, payload: Dict[str, Any]) -> Any:
        return self._request("POST", "/products", json=payload)

    def update_product(self, product_id: Any, payload: Dict[str, Any]) -> Any:
        return self._request("PUT", f"/products/{product_id}", json=payload)

    def delete_product(self, product_id: Any) -> None:
        self._request("DELETE", f"/products/{product_id}")


def _error_message(resp: requests.Response) -> Optional[str]:
    """Return the ``error`` field of a JSON error body, if any."""
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return None
