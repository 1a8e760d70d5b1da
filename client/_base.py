"""Base class for all sub-clients.

This is an internal module and should not be imported directly by users.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from client._http import HTTPClient


class BaseClient:
    """Base class for the CPQ sub-clients.

    Every sub-client (CatalogClient, QuoteClient, ...) inherits from this
    class. It holds the shared HTTP client and thin request helpers.

    Attributes:
        _http: The shared HTTP client for making requests.
    """

    def __init__(self, http_client: "HTTPClient") -> None:
        self._http = http_client

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self._http.get(path, params=params)

    def _post(
        self,
        path: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
        raw: bool = False,
    ) -> Any:
        return self._http.post(path, json=json, params=params, raw=raw)

    def _put(self, path: str, json: Any = None, params: dict[str, Any] | None = None) -> Any:
        return self._http.put(path, json=json, params=params)

    def _patch(self, path: str, json: Any = None, params: dict[str, Any] | None = None) -> Any:
        return self._http.patch(path, json=json, params=params)

    def _delete(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self._http.delete(path, params=params)
