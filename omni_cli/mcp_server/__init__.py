"""MCP server exposing OmniClient case operations as tools.

Package structure:
  __init__.py       — FastMCP init, register() calls, re-exports
  __main__.py       — ``python -m omni_cli.mcp_server`` entry point
  _core.py          — Client caching, _call dispatcher, response contract
  _tools_case.py    — 5 Epicor case tools

Vault access is not exposed over MCP.

Run: python -m omni_cli.mcp_server
Requires: pip install .[mcp]
"""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from omni_cli.mcp_server import _tools_case

mcp = FastMCP(
    "omni",
    instructions=(
        "Epicor case management tools. "
        "case_num is the positive integer Epicor case number. "
        "Every call is a single request with no retries; "
        "errors come back as {ok: false, type, error}."
    ),
)

_tools_case.register(mcp)

# ---------------------------------------------------------------------------
# Re-exports (tests import via mcp_mod.xxx)
# ---------------------------------------------------------------------------

from omni_cli.mcp_server._core import (  # noqa: E402, F401
    _call,
    _contract_error,
    _finalize_tool_result,
    _get_client,
    _validate_case_num,
)
from omni_cli.mcp_server._tools_case import (  # noqa: E402, F401
    add_case_comment,
    complete_task,
    get_case_status,
    get_last_comment,
    update_case_quote,
)


def main():
    """Run the MCP server (stdio transport)."""
    mcp.run()
