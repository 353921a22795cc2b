"""Core helpers: client caching, _call dispatcher, response contract, case-number validation."""

from __future__ import annotations

from omni_cli import CliError, OmniClient, SetupError
from omni_cli._utils import _parse_case_num
from omni_cli.config import CONTRACT_SCHEMA_VERSION

_client: OmniClient | None = None


def _get_client() -> OmniClient:
    """Return a cached OmniClient, creating one on first use."""
    global _client
    if _client is None:
        _client = OmniClient()
    return _client


def _contract_error(message: str, error_type: str = "error") -> dict:
    """Return a stable MCP error envelope."""
    return {
        "ok": False,
        "schema_version": CONTRACT_SCHEMA_VERSION,
        "type": error_type,
        "error": message,
    }


def _finalize_tool_result(result):
    """Add contract metadata (ok/schema_version) to dict responses."""
    if not isinstance(result, dict):
        return {"ok": True, "schema_version": CONTRACT_SCHEMA_VERSION, "data": result}
    out = dict(result)
    out.setdefault("schema_version", CONTRACT_SCHEMA_VERSION)
    out.setdefault("ok", True)
    return out


_ALLOWED_METHODS = {
    "complete_task",
    "add_comment",
    "get_case_status",
    "get_last_comment",
    "update_quote",
}


def _validate_case_num(value, field: str = "case_num") -> int:
    """Validate that a value is a positive integer case number. Raises CliError if not."""
    parsed = _parse_case_num(value)
    if parsed is None:
        raise CliError(f"[ERROR] {field} must be a positive integer, got: {value!r}")
    return parsed


def _call(method_name: str, **kwargs):
    """Call an OmniClient method, converting exceptions to error dicts."""
    if method_name not in _ALLOWED_METHODS:
        return _contract_error(f"Unknown method: {method_name}", "error")
    try:
        client = _get_client()
        return getattr(client, method_name)(**kwargs)
    except SetupError as e:
        return _contract_error(str(e), "setup")
    except CliError as e:
        return _contract_error(str(e), "error")
    except Exception as e:
        return _contract_error(f"Unexpected error: {e}", "error")
