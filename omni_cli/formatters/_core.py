"""Core output dispatchers."""

import json

from omni_cli import config


def output(data, formatter=None, fmt="json"):
    """Output data in requested format."""
    if fmt == "table" and formatter:
        print(formatter(data))
    else:
        print(json.dumps(data, indent=2, ensure_ascii=False))


def mutation_response(action, case_num=None, details=None, data=None, fmt="json"):
    """Print a mutation confirmation."""
    if fmt == "json":
        payload = {
            "ok": True,
            "mutation": {
                "action": action,
                "case_num": case_num,
                "details": details,
            },
        }
        if data:
            payload["data"] = data
        print(json.dumps(payload, ensure_ascii=False))
        return
    if config.RUNTIME_QUIET:
        return
    parts = [action]
    if case_num is not None:
        parts.append(f"case {case_num}")
    if details:
        parts.append(details)
    print(f"OK: {': '.join(parts)}")
