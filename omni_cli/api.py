"""
HTTP request layer, envelope builder, and typed dispatcher for omni-cli.

One request is issued per call. There are no retries: every failure is
classified once and raised to the caller.
"""

import json
import re
import time
import urllib.error
import urllib.request
import uuid
from dataclasses import dataclass

from omni_cli import config
from omni_cli._utils import log_event
from omni_cli.exceptions import (
    ConfigurationError,
    DecodeError,
    EndpointNotPublishedError,
    HTTPError,
    RemoteApplicationError,
    TransportError,
)
from omni_cli.models import read_envelope

NOT_PUBLISHED_MESSAGE = (
    "[ERROR] The Omni function library is not published in Epicor. "
    "Please publish the function library and try again."
)

_HEADER_UNSAFE_RE = re.compile(r"[\r\n\x00]")


# ---------------------------------------------------------------------------
# Security helpers
# ---------------------------------------------------------------------------


def _sanitize_error(body, max_len=500):
    """Truncate and clean error body for safe display."""
    if not body:
        return ""
    cleaned = re.sub(r"<[^>]+>", "", body)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    if len(cleaned) > max_len:
        return cleaned[:max_len] + "... [truncated]"
    return cleaned


def _error_envelope(message, status=None, request_id=None, detail=None):
    """Build a consistent CLI-safe HTTP error message."""
    meta = []
    if status is not None:
        meta.append(f"status={status}")
    if request_id:
        meta.append(f"request_id={request_id}")
    suffix = f" ({', '.join(meta)})" if meta else ""
    body = f"[ERROR] {message}{suffix}"
    if detail:
        body += f"\n{detail}"
    return body


# ---------------------------------------------------------------------------
# Credentials and envelope
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ApiCredentials:
    api_key: str
    basic_auth: str
    base_url: str

    def __repr__(self):
        return f"ApiCredentials(api_key='***', basic_auth='***', base_url={self.base_url!r})"


@dataclass(frozen=True)
class Envelope:
    """Everything needed to issue one authenticated POST."""

    url: str
    headers: dict
    data: bytes


def load_credentials():
    """Read Epicor credentials from configuration. Raises ConfigurationError."""
    keys = (config.EPICOR_API_KEY_VAR, config.EPICOR_BASIC_AUTH_VAR, config.EPICOR_BASE_URL_VAR)
    values = {k: config.get_value(k) for k in keys}
    missing = [k for k, v in values.items() if not v]
    if missing:
        raise ConfigurationError(
            f"[SETUP_NEEDED] {', '.join(missing)} not set.\n  Run: omni setup"
        )
    return ApiCredentials(
        api_key=values[config.EPICOR_API_KEY_VAR],
        basic_auth=values[config.EPICOR_BASIC_AUTH_VAR],
        base_url=values[config.EPICOR_BASE_URL_VAR],
    )


def _header_value(name, value):
    """Validate a header value; urllib would fail later with a less useful error."""
    if _HEADER_UNSAFE_RE.search(value):
        raise ConfigurationError(f"[SETUP_NEEDED] {name} contains control characters.")
    try:
        value.encode("latin-1")
    except UnicodeEncodeError:
        raise ConfigurationError(
            f"[SETUP_NEEDED] {name} contains characters that cannot be sent in an HTTP header."
        ) from None
    return value


def build_url(base_url, path):
    return f"{base_url.rstrip('/')}/{config.API_PREFIX}/{path.lstrip('/')}"


def build_envelope(path, body, credentials=None):
    """Compose URL, auth headers, and serialized body for *path*."""
    creds = credentials or load_credentials()
    headers = {
        "X-API-Key": _header_value(config.EPICOR_API_KEY_VAR, creds.api_key),
        "Authorization": _header_value(config.EPICOR_BASIC_AUTH_VAR, creds.basic_auth),
        "Content-Type": config.CONTENT_TYPE,
        "Accept": "application/json",
        "X-Request-Id": str(uuid.uuid4()),
    }
    data = json.dumps(body, ensure_ascii=False).encode("utf-8")
    return Envelope(url=build_url(creds.base_url, path), headers=headers, data=data)


def endpoint_path(action):
    """Function-library path for *action*, e.g. ``efx/100/Omni/CompleteTask``."""
    return f"efx/{config.EPICOR_COMPANY}/{config.EPICOR_LIBRARY}/{action}"


# ---------------------------------------------------------------------------
# HTTP request layer
# ---------------------------------------------------------------------------


def _http_request(url, data, headers, method="POST"):
    """Issue one HTTP request and return the parsed JSON body.

    Raises HTTPError for non-2xx responses (caller classifies the code),
    TransportError for network failures and timeouts, DecodeError when the
    body is not JSON.
    """
    request_id = headers.get("X-Request-Id")
    timeout = max(1, config.HTTP_TIMEOUT_SECONDS)
    start = time.perf_counter()
    req = urllib.request.Request(url, data=data, headers=headers, method=method)
    log_event(
        "HTTP",
        phase="request",
        method=method,
        url=url,
        request_id=request_id,
        timeout_seconds=timeout,
    )
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            content_type = resp.headers.get("Content-Type", "")
            raw = resp.read(config.HTTP_MAX_RESPONSE_BYTES + 1)
            if len(raw) > config.HTTP_MAX_RESPONSE_BYTES:
                raise DecodeError(
                    "[ERROR] Response too large from Epicor "
                    f"(>{config.HTTP_MAX_RESPONSE_BYTES} bytes)."
                )
            log_event(
                "HTTP",
                phase="response",
                method=method,
                url=url,
                status=getattr(resp, "status", 200),
                content_type=content_type,
                bytes=len(raw),
                latency_ms=round((time.perf_counter() - start) * 1000, 2),
                request_id=request_id,
            )
            try:
                return json.loads(raw.decode("utf-8"))
            except (json.JSONDecodeError, UnicodeDecodeError):
                if content_type and "json" not in content_type.lower():
                    raise DecodeError(
                        f"[ERROR] Unexpected Content-Type from server "
                        f"({content_type}). This may be a proxy or "
                        "network issue."
                    ) from None
                raise DecodeError(
                    "[ERROR] Unexpected response from Epicor (not valid JSON)."
                ) from None
    except urllib.error.HTTPError as e:
        error_body = (
            e.read(config.HTTP_MAX_RESPONSE_BYTES).decode("utf-8", errors="replace")
            if e.fp
            else ""
        )
        log_event(
            "HTTP",
            phase="response",
            method=method,
            url=url,
            status=e.code,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
            request_id=request_id,
        )
        raise HTTPError(e.code, e.reason, error_body, headers=e.headers) from e
    except TimeoutError as e:
        log_event("HTTP", phase="network_error", method=method, url=url, error="timeout")
        raise TransportError(
            _error_envelope(
                f"Request timed out after {timeout} seconds. Is Epicor reachable?",
                request_id=request_id,
            )
        ) from e
    except urllib.error.URLError as e:
        log_event(
            "HTTP", phase="network_error", method=method, url=url, error=f"url_error: {e.reason}"
        )
        raise TransportError(
            _error_envelope(f"Connection failed: {e.reason}", request_id=request_id)
        ) from e


def post(path, body, credentials=None):
    """POST *body* to *path* and return parsed JSON; classify HTTP failures."""
    envelope = build_envelope(path, body, credentials)
    try:
        return _http_request(envelope.url, envelope.data, envelope.headers)
    except HTTPError as e:
        if e.code == 404:
            raise EndpointNotPublishedError(NOT_PUBLISHED_MESSAGE) from e
        server_req_id = e.headers.get("X-Request-Id") if e.headers else None
        raise TransportError(
            _error_envelope(
                f"HTTP {e.code}: {e.reason}",
                status=e.code,
                request_id=server_req_id,
                detail=_sanitize_error(e.body),
            ),
            status=e.code,
        ) from e


# ---------------------------------------------------------------------------
# Typed dispatcher
# ---------------------------------------------------------------------------


def dispatch(request, credentials=None):
    """Send a CaseRequest variant and return its paired response variant.

    Raises EndpointNotPublishedError, TransportError, DecodeError, or
    RemoteApplicationError (when the envelope reports ``Error: true``).
    """
    result = post(endpoint_path(request.action), request.to_body(), credentials)
    error, message = read_envelope(result)
    if error:
        raise RemoteApplicationError(message or "")
    return request.response_type.from_body(result)
