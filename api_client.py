# api_client.py - JSON HTTP client wrapper around a shared, pooled requests.Session
import os
from typing import Any, Mapping, Optional

import requests
from requests import Request, exceptions as req_exceptions
from requests.adapters import HTTPAdapter
from requests.structures import CaseInsensitiveDict

from errors import DecodingError, TransportError
from utils.payload_codec import decode_body, encode_body, get_logger

logger = get_logger("api-client")

# CONFIG (override via env if you prefer)
TIMEOUT = float(os.environ.get("HTTP_TIMEOUT", "30"))                  # seconds
POOL_CONNECTIONS = int(os.environ.get("HTTP_POOL_CONNECTIONS", "10"))  # pooled hosts
POOL_MAXSIZE = int(os.environ.get("HTTP_POOL_MAXSIZE", "10"))          # connections per host
SKIP_EMPTY_BODY = os.environ.get("HTTP_SKIP_EMPTY_BODY", "1").lower() not in ("0", "false", "no")

JSON_CONTENT_TYPE = "application/json;charset=utf-8"


def build_session(pool_connections=POOL_CONNECTIONS, pool_maxsize=POOL_MAXSIZE, adapter=None):
    """Create the long-lived session every call goes through.

    Its configuration is never modified afterwards; per-call headers
    travel on the request itself. The cookie jar is the one piece of
    state that changes: Set-Cookie replies are kept and replayed on
    later calls.
    """
    session = requests.Session()
    adapter = adapter or HTTPAdapter(pool_connections=pool_connections, pool_maxsize=pool_maxsize)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def build_query_url(url: str, params: Optional[Mapping[str, str]]) -> str:
    """Append ``key=value&`` for every param, in order.

    Keeps the historical wire format: a trailing ``&`` and no
    percent-encoding of keys or values.
    """
    query = "".join(f"{k}={v}&" for k, v in (params or {}).items())
    return f"{url}?{query}"


class APIClient:
    """Blocking GET/POST helpers that speak JSON over one shared session."""

    def __init__(self, session=None, timeout=TIMEOUT, skip_empty_body=SKIP_EMPTY_BODY):
        self.session = session or build_session()
        self.timeout = timeout
        self.skip_empty_body = skip_empty_body

    def get(self, url: str, params: Optional[Mapping[str, str]], result_shape: Any):
        full_url = build_query_url(url, params)
        response = self._send(Request("GET", full_url))
        return self._decode(response, result_shape)

    def post_raw(self, url: str, body: str) -> None:
        """Fire-and-forget POST of an already serialized JSON string."""
        self._send(Request("POST", url, headers=self._headers(), data=body.encode("utf-8")))

    def post(self, url: str, body: Any, result_shape: Any):
        """POST a model, dataclass or ``{str: str}`` mapping serialized as JSON."""
        payload = encode_body(body)
        request = Request("POST", url, headers=self._headers(), data=payload.encode("utf-8"))
        return self._decode(self._send(request), result_shape)

    def post_json(self, url: str, body: str, headers: Optional[Mapping[str, str]], result_shape: Any):
        """POST a pre-serialized body with extra headers.

        Caller headers are applied after the default content type and win on
        conflict. An empty body attaches no entity unless ``skip_empty_body``
        is off.
        """
        request = Request("POST", url, headers=self._headers(headers), data=body.encode("utf-8") if body else None)
        empty_entity = not body and not self.skip_empty_body
        return self._decode(self._send(request, empty_entity=empty_entity), result_shape)

    @staticmethod
    def _headers(extra=None):
        headers = CaseInsensitiveDict({"Content-Type": JSON_CONTENT_TYPE})
        if extra:
            headers.update(extra)
        return headers

    def _send(self, request, empty_entity=False):
        try:
            prepared = self.session.prepare_request(request)
            if empty_entity:
                # requests drops b"" bodies on prepare
                prepared.body = b""
            self._log_prepared(prepared)
            response = self.session.send(prepared, timeout=self.timeout)
        except req_exceptions.RequestException as e:
            logger.error("%s %s failed: %s", request.method, request.url, e)
            raise TransportError(f"{request.method} {request.url} failed: {e}", url=request.url) from e
        logger.debug("RESP-STATUS %s %s", response.status_code, response.url)
        return response

    def _decode(self, response, result_shape):
        try:
            return decode_body(response.content, result_shape, url=response.url, status_code=response.status_code)
        except DecodingError:
            logger.warning("could not decode response from %s (status %s)", response.url, response.status_code)
            raise

    @staticmethod
    def _log_prepared(prepared):
        # Authorization is redacted in logs, only the scheme survives
        safe_headers = {}
        for k, v in prepared.headers.items():
            if k.lower() == "authorization":
                scheme, _, credentials = v.partition(" ")
                v = f"{scheme} [REDACTED]" if credentials else "[REDACTED]"
            safe_headers[k] = v
        logger.debug("%s %s", prepared.method, prepared.url)
        for k, v in safe_headers.items():
            logger.debug("REQ-HEADER %s: %s", k, v)
        body_preview = prepared.body
        if isinstance(body_preview, bytes):
            body_preview = body_preview.decode("utf-8", errors="ignore")
        logger.debug("REQ-BODY: %s", body_preview)


# Shared process-wide client, built once at import
default_client = APIClient()


def do_get(url, params, result_shape):
    return default_client.get(url, params, result_shape)


def do_post_raw(url, body):
    default_client.post_raw(url, body)


def do_post(url, body, result_shape):
    return default_client.post(url, body, result_shape)


def do_post_json(url, body, headers, result_shape):
    return default_client.post_json(url, body, headers, result_shape)
