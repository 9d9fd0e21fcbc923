"""
Lead Engine - canonical lead model for real-estate sales lead imports.

Spreadsheet exports arrive with free-form Turkish headers; everything the
import pipeline produces ends up in a CanonicalLead. Downstream reporting
consumes the camelCase record produced by CanonicalLead.to_record(), so the
names in FIELD_NAMES are part of the contract and must not change.
"""

import re
from dataclasses import dataclass, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


UNDEFINED_STATUS = "Tanımsız"

# Placeholder the legacy dashboard stamped on every lead without a project
LEGACY_DEFAULT_PROJECT = "Model Sanayi Merkezi"


class LeadType(Enum):
    """Classification of a lead's inquiry."""
    SATIS = "satis"
    KIRALAMA = "kiralama"


class RowMappingError(ValueError):
    """Raised when a mapped row cannot be coerced into a CanonicalLead."""
    pass


# snake_case attribute -> camelCase record key
FIELD_NAMES = {
    "customer_name": "customerName",
    "request_date": "requestDate",
    "lead_type": "leadType",
    "assigned_personnel": "assignedPersonnel",
    "status": "status",
    "customer_id": "customerId",
    "contact_id": "contactId",
    "first_customer_source": "firstCustomerSource",
    "form_customer_source": "formCustomerSource",
    "web_form_note": "webFormNote",
    "project_name": "projectName",
    "info_form_location_1": "infoFormLocation1",
    "info_form_location_2": "infoFormLocation2",
    "info_form_location_3": "infoFormLocation3",
    "info_form_location_4": "infoFormLocation4",
    "reminder_personnel": "reminderPersonnel",
    "was_called_back": "wasCalledBack",
    "web_form_pool_date": "webFormPoolDate",
    "form_system_date": "formSystemDate",
    "assignment_time_diff": "assignmentTimeDiff",
    "response_time_diff": "responseTimeDiff",
    "outgoing_call_system_date": "outgoingCallSystemDate",
    "customer_response_date": "customerResponseDate",
    "was_email_sent": "wasEmailSent",
    "customer_email_response_date": "customerEmailResponseDate",
    "unreachable_by_phone": "unreachableByPhone",
    "days_waiting_response": "daysWaitingResponse",
    "days_to_response": "daysToResponse",
    "call_note": "callNote",
    "email_note": "emailNote",
    "one_on_one_meeting": "oneOnOneMeeting",
    "meeting_date": "meetingDate",
    "response_result": "responseResult",
    "negative_reason": "negativeReason",
    "was_sale_made": "wasSaleMade",
    "sale_count": "saleCount",
    "appointment_date": "appointmentDate",
    "last_meeting_note": "lastMeetingNote",
    "last_meeting_result": "lastMeetingResult",
}

RECORD_KEYS = {camel: snake for snake, camel in FIELD_NAMES.items()}

INTEGER_FIELDS = ("days_waiting_response", "days_to_response", "sale_count")

_INTEGER_RE = re.compile(r"^[+-]?\d+(?:\.0*)?$")


def _coerce_int(field_name: str, value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise RowMappingError(f"Invalid integer for {FIELD_NAMES[field_name]}: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise RowMappingError(f"Invalid integer for {FIELD_NAMES[field_name]}: {value!r}")

    text = str(value).strip()
    if not text:
        return None
    if not _INTEGER_RE.match(text):
        raise RowMappingError(f"Invalid integer for {FIELD_NAMES[field_name]}: '{text}'")
    return int(text.split(".")[0])


@dataclass
class CanonicalLead:
    """A single normalized lead, one per accepted spreadsheet row."""
    customer_name: str = ""
    request_date: str = ""
    assigned_personnel: str = ""
    lead_type: str = LeadType.KIRALAMA.value
    status: str = UNDEFINED_STATUS

    customer_id: Optional[str] = None
    contact_id: Optional[str] = None
    first_customer_source: Optional[str] = None
    form_customer_source: Optional[str] = None
    web_form_note: Optional[str] = None
    project_name: Optional[str] = None
    info_form_location_1: Optional[str] = None
    info_form_location_2: Optional[str] = None
    info_form_location_3: Optional[str] = None
    info_form_location_4: Optional[str] = None
    reminder_personnel: Optional[str] = None
    was_called_back: Optional[str] = None
    web_form_pool_date: Optional[str] = None
    form_system_date: Optional[str] = None
    assignment_time_diff: Optional[str] = None
    response_time_diff: Optional[str] = None
    outgoing_call_system_date: Optional[str] = None
    customer_response_date: Optional[str] = None
    was_email_sent: Optional[str] = None
    customer_email_response_date: Optional[str] = None
    unreachable_by_phone: Optional[str] = None
    days_waiting_response: Optional[Any] = None
    days_to_response: Optional[Any] = None
    call_note: Optional[str] = None
    email_note: Optional[str] = None
    one_on_one_meeting: Optional[str] = None
    meeting_date: Optional[str] = None
    response_result: Optional[str] = None
    negative_reason: Optional[str] = None
    was_sale_made: Optional[str] = None
    sale_count: Optional[Any] = None
    appointment_date: Optional[str] = None
    last_meeting_note: Optional[str] = None
    last_meeting_result: Optional[str] = None

    # Assigned by the lead store
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def is_blank(self) -> bool:
        """True when the row carried neither a customer nor a salesperson."""
        return not self.customer_name and not self.assigned_personnel

    def coerce(self) -> "CanonicalLead":
        """
        Return a copy with integer fields converted.

        Raises:
            RowMappingError: If an integer field holds a non-numeric value
        """
        converted = {name: _coerce_int(name, getattr(self, name)) for name in INTEGER_FIELDS}
        return replace(self, **converted)

    def to_record(self) -> Dict[str, Any]:
        """Serialize with the camelCase field names used downstream."""
        record = {camel: getattr(self, snake) for snake, camel in FIELD_NAMES.items()}
        if self.id is not None:
            record["id"] = self.id
        if self.created_at is not None:
            record["createdAt"] = self.created_at.isoformat()
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CanonicalLead":
        """Build a lead from a camelCase record; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}

        for key, value in record.items():
            if key in RECORD_KEYS:
                kwargs[RECORD_KEYS[key]] = value
            elif key in known:
                kwargs[key] = value

        created_at = record.get("createdAt", record.get("created_at"))
        kwargs.pop("created_at", None)
        if isinstance(created_at, datetime):
            kwargs["created_at"] = created_at
        elif isinstance(created_at, str):
            try:
                kwargs["created_at"] = datetime.fromisoformat(created_at)
            except ValueError:
                pass

        for required in ("customer_name", "request_date", "assigned_personnel"):
            if kwargs.get(required) is None:
                kwargs[required] = ""
        if not kwargs.get("lead_type"):
            kwargs["lead_type"] = LeadType.KIRALAMA.value
        if not kwargs.get("status"):
            kwargs["status"] = UNDEFINED_STATUS

        return cls(**kwargs)
