import gzip
import json
import time
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from bosonnlp import __version__
from bosonnlp.core.logging_config import get_logger
from bosonnlp.core.exceptions import (
    DecodeError,
    HTTPError,
    MissingTokenError,
    TransportError,
)
from bosonnlp.core.metrics import API_ERRORS_TOTAL, API_REQUEST_DURATION_SECONDS, API_REQUESTS_TOTAL

log = get_logger(__name__)

T = TypeVar("T")

# Bodies larger than this are gzipped when compression is enabled.
COMPRESS_THRESHOLD_BYTES = 10 * 1024


class BaseServiceClient:
    """Cliente HTTP base síncrono: auth, compresión y decodificación JSON."""

    def __init__(
        self,
        base_url: str,
        service_name: str,
        token: Optional[str],
        timeout: float,
        compress: bool = True,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.service_name = service_name
        self.token = token
        self.compress = compress
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=httpx.Timeout(timeout))
        self.log = log.bind(service_client=service_name, service_url=self.base_url)

    def close(self) -> None:
        """Cierra el cliente HTTP."""
        if self._owns_client:
            self.client.close()
            self.log.debug(f"{self.service_name} client closed.")

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            raise MissingTokenError(
                f"No API token configured for {self.service_name}. "
                "Pass token=... or set BOSONNLP_API_TOKEN."
            )
        return {
            "X-Token": self.token,
            "Accept": "application/json",
            "User-Agent": f"bosonnlp-py/{__version__}",
        }

    def _encode_body(self, data: Any, headers: Dict[str, str]) -> bytes:
        body = json.dumps(data, ensure_ascii=False).encode("utf-8")
        if self.compress and len(body) > COMPRESS_THRESHOLD_BYTES:
            headers["Content-Encoding"] = "gzip"
            self.log.debug("Compressing request body", raw_size=len(body))
            body = gzip.compress(body)
        return body

    def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        data: Any = None,
        metric_endpoint: Optional[str] = None,
    ) -> Any:
        """Sends one request and returns the decoded JSON body."""
        headers = self._headers()
        if method == "POST":
            headers["Content-Type"] = "application/json"
        content = self._encode_body(data, headers) if data is not None else None
        metric_endpoint = metric_endpoint or endpoint.split("?", 1)[0]

        self.log.debug(f"Requesting {self.service_name}", method=method, endpoint=endpoint, params=params)
        start_time = time.perf_counter()
        try:
            response = self.client.request(
                method=method,
                url=f"{self.base_url}{endpoint}",
                params=params or None,
                content=content,
                headers=headers,
            )
        except httpx.RequestError as e:
            self.log.error(f"Network error when calling {self.service_name}", endpoint=endpoint, error=str(e))
            API_ERRORS_TOTAL.labels(endpoint=metric_endpoint, error_type="transport_error").inc()
            raise TransportError(
                message=f"Request to {self.service_name} failed: {type(e).__name__}",
                detail=str(e)
            ) from e
        finally:
            API_REQUEST_DURATION_SECONDS.labels(endpoint=metric_endpoint).observe(time.perf_counter() - start_time)

        API_REQUESTS_TOTAL.labels(endpoint=metric_endpoint, status=str(response.status_code)).inc()
        self.log.debug(f"Received response from {self.service_name}", status_code=response.status_code, body=response.text[:200])

        if not response.is_success:
            reason = response.text
            try:
                error_json = response.json()
                if isinstance(error_json, dict) and "message" in error_json:
                    reason = error_json["message"]
            except ValueError:
                pass
            self.log.error(
                f"HTTP error from {self.service_name}",
                endpoint=endpoint,
                status_code=response.status_code,
                reason=reason
            )
            API_ERRORS_TOTAL.labels(endpoint=metric_endpoint, error_type="http_error").inc()
            raise HTTPError(
                message=f"{self.service_name} returned HTTP error: {response.status_code}",
                status_code=response.status_code,
                detail=reason
            )

        try:
            return response.json()
        except ValueError as e:
            self.log.error(f"Invalid JSON from {self.service_name}", endpoint=endpoint, body_preview=response.text[:200])
            API_ERRORS_TOTAL.labels(endpoint=metric_endpoint, error_type="decode_error").inc()
            raise DecodeError(
                message=f"{self.service_name} returned a body that is not valid JSON.",
                status_code=response.status_code,
                detail=response.text
            ) from e

    def _decode(self, payload: Any, type_: Type[T]) -> T:
        """Validates decoded JSON against ``type_``."""
        try:
            return TypeAdapter(type_).validate_python(payload)
        except ValidationError as e:
            self.log.error("Unexpected response shape", expected=str(type_), payload_preview=str(payload)[:200])
            raise DecodeError(
                message=f"Invalid response format from {self.service_name}.",
                detail=payload
            ) from e

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None, **kwargs: Any) -> Any:
        return self._request("GET", endpoint, params=params, **kwargs)

    def post(self, endpoint: str, data: Any, params: Optional[Dict[str, Any]] = None, **kwargs: Any) -> Any:
        return self._request("POST", endpoint, params=params, data=data, **kwargs)
