"""
Typed request/response models for the Epicor Omni function library.

Each request variant names the endpoint action it calls and the response
variant it decodes into. api.dispatch relies on that pairing, so a request
can only ever come back as its own response type.

Field wire names are fixed, capitalized Epicor identifiers kept in field
metadata.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields

from omni_cli.exceptions import DecodeError

_KIND_CHECKS = {
    "bool": lambda v: isinstance(v, bool),
    "int": lambda v: isinstance(v, int) and not isinstance(v, bool),
    "float": lambda v: isinstance(v, (int, float)) and not isinstance(v, bool),
    "str": lambda v: isinstance(v, str),
}


def _wire(name, kind, *, optional=False):
    """Declare a dataclass field bound to Epicor wire name *name*."""
    meta = {"wire": name, "kind": kind, "optional": optional}
    if optional:
        return field(default=None, metadata=meta)
    return field(metadata=meta)


def read_envelope(body):
    """Return ``(error, message)`` from a decoded response body.

    Raises DecodeError when the body is not an object, ``Error`` is not a
    boolean, or ``Message`` is present but not a string. ``message`` is None
    when absent.
    """
    if not isinstance(body, dict):
        raise DecodeError(
            f"[ERROR] Unexpected response shape: expected JSON object, got {type(body).__name__}."
        )
    error = body.get("Error")
    if not isinstance(error, bool):
        raise DecodeError(
            "[ERROR] Unexpected response shape: 'Error' flag missing or not a boolean."
        )
    message = body.get("Message")
    if message is not None and not isinstance(message, str):
        raise DecodeError(
            "[ERROR] Unexpected response shape: 'Message' expected str, "
            f"got {type(message).__name__}."
        )
    return error, message


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


@dataclass(frozen=True, kw_only=True)
class CaseResponse:
    """Envelope shared by every Omni response."""

    error: bool = _wire("Error", "bool")
    message: str | None = _wire("Message", "str", optional=True)

    @classmethod
    def from_body(cls, body):
        """Decode *body* into this variant. Raises DecodeError on shape mismatch."""
        if not isinstance(body, dict):
            raise DecodeError(
                f"[ERROR] Unexpected {cls.__name__} shape: "
                f"expected JSON object, got {type(body).__name__}."
            )
        values = {}
        problems = []
        for f in fields(cls):
            wire = f.metadata["wire"]
            value = body.get(wire)
            if value is None:
                if not f.metadata["optional"]:
                    problems.append(f"missing {wire}")
                continue
            kind = f.metadata["kind"]
            if not _KIND_CHECKS[kind](value):
                problems.append(f"{wire} expected {kind}, got {type(value).__name__}")
                continue
            values[f.name] = value
        if problems:
            raise DecodeError(
                f"[ERROR] Unexpected {cls.__name__} shape: {'; '.join(problems)}."
            )
        return cls(**values)

    def to_dict(self):
        """Snake_case view for JSON output (``error`` and ``message`` included)."""
        return {f.name: getattr(self, f.name) for f in fields(self)}



@dataclass(frozen=True, kw_only=True)
class CompleteTaskResponse(CaseResponse):
    has_active_task: bool = _wire("HasActiveTask", "bool")
    authorized_to_complete_task: bool = _wire("AuthorizedToCompleteTask", "bool")
    multiple_sales_rep_matches: bool = _wire("MultipleSalesRepMatches", "bool")
    no_sales_rep_match: bool = _wire("NoSalesRepMatch", "bool")


@dataclass(frozen=True, kw_only=True)
class CaseStatusResponse(CaseResponse):
    project_id: str = _wire("ProjectID", "str")
    case_description: str = _wire("CaseDescription", "str")
    part_num: str = _wire("PartNum", "str")
    qty: float = _wire("Qty", "float")
    unit_price: float = _wire("UnitPrice", "float")
    case_owner: str = _wire("CaseOwner", "str")
    internal_contact: str = _wire("InternalContact", "str")
    case_contact: str = _wire("CaseContact", "str")
    current_task: str = _wire("CurrentTask", "str")
    current_task_assigned_to: str = _wire("CurrentTaskAssignedTo", "str")
    requested_delivery: str = _wire("RequestedDelivery", "str")
    start_date: str = _wire("StartDate", "str")
    expected_delivery_date: str = _wire("ExpectedDeliveryDate", "str")
    developer: str = _wire("Developer", "str")
    wbs_phase_id: str = _wire("WBSPhaseID", "str")
    wbs_phase_op: int = _wire("WBSPhaseOp", "int")
    estimated_hours: float = _wire("EstimatedHours", "float")
    hours_scheduled: float = _wire("HoursScheduled", "float")
    hours_applied: float = _wire("HoursApplied", "float")
    billed_percent: float = _wire("BilledPercent", "float")


@dataclass(frozen=True, kw_only=True)
class UpdateQuoteResponse(CaseResponse):
    pass


@dataclass(frozen=True, kw_only=True)
class AddCaseCommentResponse(CaseResponse):
    pass


@dataclass(frozen=True, kw_only=True)
class GetLastCommentResponse(CaseResponse):
    comment: str | None = _wire("Comment", "str", optional=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CaseRequest:
    """Base for request variants. Subclasses set ``action`` and ``response_type``."""

    action = ""
    response_type = CaseResponse

    def to_body(self):
        """JSON body with Epicor field names, in declaration order."""
        return {f.metadata["wire"]: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class CompleteTaskRequest(CaseRequest):
    case_num: int = _wire("CaseNum", "int")
    assign_next_to_name: str = _wire("AssignNextToName", "str")

    action = "CompleteTask"
    response_type = CompleteTaskResponse


@dataclass(frozen=True)
class CaseStatusRequest(CaseRequest):
    case_num: int = _wire("CaseNum", "int")

    action = "GetCaseStatus"
    response_type = CaseStatusResponse


@dataclass(frozen=True)
class UpdateQuoteRequest(CaseRequest):
    case_num: int = _wire("CaseNum", "int")
    qty: float = _wire("Qty", "float")

    action = "UpdateCaseQuote"
    response_type = UpdateQuoteResponse


@dataclass(frozen=True)
class AddCaseCommentRequest(CaseRequest):
    case_num: int = _wire("CaseNum", "int")
    comment: str = _wire("Comment", "str")

    action = "AddCaseComment"
    response_type = AddCaseCommentResponse


@dataclass(frozen=True)
class GetLastCommentRequest(CaseRequest):
    case_num: int = _wire("CaseNum", "int")

    action = "GetLastComment"
    response_type = GetLastCommentResponse


REQUEST_TYPES = (
    CompleteTaskRequest,
    CaseStatusRequest,
    UpdateQuoteRequest,
    AddCaseCommentRequest,
    GetLastCommentRequest,
)
