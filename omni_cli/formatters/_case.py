"""Case formatters: status detail, last comment, task completion."""

from omni_cli.formatters._table import _labelled, _sanitize_str

NO_COMMENTS = "No comments"

_STATUS_FIELDS = [
    ("Case Number", "case_num"),
    ("Case Owner", "case_owner"),
    ("Case Contact", "case_contact"),
    ("Internal Contact", "internal_contact"),
    ("Case Description", "case_description"),
    ("Project", "project_id"),
    ("Part Num", "part_num"),
    ("Unit Price", "unit_price"),
    ("Quantity", "qty"),
    ("Phase", "wbs_phase_id"),
    ("Op", "wbs_phase_op"),
    ("Current Task", "current_task"),
    ("Assigned To", "current_task_assigned_to"),
    ("Case Developer", "developer"),
    ("Request Date", "requested_delivery"),
    ("Start Date", "start_date"),
    ("Expected Delivery Date", "expected_delivery_date"),
    ("Estimated Hours", "estimated_hours"),
    ("Hours Scheduled", "hours_scheduled"),
    ("Hours Applied", "hours_applied"),
    ("Billed Percent", "billed_percent"),
]


def format_case_status(result):
    """Format OmniClient.get_case_status() output as labelled lines."""
    if not result:
        return "Case not found."
    return _labelled([(label, result.get(key)) for label, key in _STATUS_FIELDS])


def format_last_comment(result):
    comment = result.get("comment")
    if not comment:
        comment = NO_COMMENTS
    return f"Last Comment (case {result.get('case_num', '?')}):\n{_sanitize_str(comment)}"


def format_complete_task(result):
    lines = [f"Task Completed: case {result.get('case_num')} -> {result.get('assigned_to')}"]
    if result.get("comment_added"):
        lines.append("Comment Added to Case")
    elif result.get("comment_error"):
        lines.append(f"[WARN] Comment not added: {_sanitize_str(result['comment_error'])}")
    if result.get("message"):
        lines.append(_sanitize_str(result["message"]))
    return "\n".join(lines)
