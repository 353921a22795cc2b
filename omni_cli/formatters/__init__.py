"""Output formatting package for omni-cli.

Re-exports all public names so consumers can do:
    from omni_cli.formatters import format_case_status
"""

from omni_cli.formatters._case import (
    NO_COMMENTS,
    format_case_status,
    format_complete_task,
    format_last_comment,
)
from omni_cli.formatters._core import (
    mutation_response,
    output,
)
from omni_cli.formatters._table import (
    _CONTROL_RE,
    _labelled,
    _sanitize_str,
    _table,
    _trunc,
)
from omni_cli.formatters._vault import (
    format_vault_items,
    format_vault_output,
)

__all__ = [
    "NO_COMMENTS",
    "_CONTROL_RE",
    "_labelled",
    "_sanitize_str",
    "_table",
    "_trunc",
    "format_case_status",
    "format_complete_task",
    "format_last_comment",
    "format_vault_items",
    "format_vault_output",
    "mutation_response",
    "output",
]
