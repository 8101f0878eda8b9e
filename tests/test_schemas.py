"""Unit tests for request payloads and API schemas."""

from __future__ import annotations

import uuid

import pytest
from pydantic import TypeAdapter, ValidationError

from ums.models.enums import ProfileSection
from ums.schemas.request import (
    CreateRequestPayload,
    LeavePayload,
    OutpassPayload,
    ProfileUpdatePayload,
    RejectPayload,
    RequestPayload,
    ResubmitPayload,
    SalaryPayload,
)

_adapter: TypeAdapter[RequestPayload] = TypeAdapter(RequestPayload)
_USER = uuid.uuid4()

# ---------------------------------------------------------------------------
# Typed payloads
# ---------------------------------------------------------------------------


def test_leave_payload_accepts_camel_case_user_id() -> None:
    p = LeavePayload.model_validate({"userId": str(_USER), "leave": {"from": "2026-11-01"}})
    assert p.user_id == _USER
    assert p.type == "LEAVE"


def test_leave_payload_accepts_field_name() -> None:
    p = LeavePayload(user_id=_USER, leave={"days": 3})
    assert p.leave == {"days": 3}


def test_payload_requires_user_id() -> None:
    with pytest.raises(ValidationError):
        SalaryPayload.model_validate({"salary": {"basic": 6000}})


def test_payload_requires_body_key() -> None:
    with pytest.raises(ValidationError):
        OutpassPayload.model_validate({"userId": str(_USER)})


def test_to_document_uses_camel_case_and_drops_type() -> None:
    doc = SalaryPayload(user_id=_USER, salary={"basic": 6000}).to_document()
    assert doc == {"userId": str(_USER), "salary": {"basic": 6000}}


def test_profile_update_payload_valid() -> None:
    p = ProfileUpdatePayload.model_validate(
        {"userId": str(_USER), "section": "medical", "data": {"bloodGroup": "O+"}}
    )
    assert p.section == ProfileSection.MEDICAL
    assert p.to_document()["section"] == "medical"


def test_profile_update_payload_allows_list_and_null_data() -> None:
    assert ProfileUpdatePayload(user_id=_USER, section=ProfileSection.EDUCATION, data=[{"degree": "BA"}]).data
    assert ProfileUpdatePayload(user_id=_USER, section=ProfileSection.FAMILY, data=None).data is None


def test_profile_update_payload_rejects_documents_section() -> None:
    with pytest.raises(ValidationError, match="cannot be changed through a request"):
        ProfileUpdatePayload(user_id=_USER, section=ProfileSection.DOCUMENTS, data={})


def test_profile_update_payload_rejects_unknown_section() -> None:
    with pytest.raises(ValidationError):
        ProfileUpdatePayload.model_validate({"userId": str(_USER), "section": "hobbies", "data": {}})


# ---------------------------------------------------------------------------
# Discriminated union
# ---------------------------------------------------------------------------


def test_union_dispatches_on_type() -> None:
    payload = _adapter.validate_python({"type": "OUTPASS", "userId": str(_USER), "outpass": {"date": "2026-10-20"}})
    assert isinstance(payload, OutpassPayload)


def test_union_rejects_unknown_type() -> None:
    with pytest.raises(ValidationError):
        _adapter.validate_python({"type": "PROMOTION", "userId": str(_USER)})


def test_union_rejects_missing_type() -> None:
    with pytest.raises(ValidationError):
        _adapter.validate_python({"userId": str(_USER), "leave": {}})


def test_create_request_payload_root() -> None:
    body = CreateRequestPayload.model_validate({"type": "SALARY", "userId": str(_USER), "salary": {"basic": 1}})
    assert isinstance(body.root, SalaryPayload)


# ---------------------------------------------------------------------------
# Lifecycle bodies
# ---------------------------------------------------------------------------


def test_reject_payload_accepts_reason_alias() -> None:
    assert RejectPayload.model_validate({"reason": "Incomplete"}).remark == "Incomplete"


def test_reject_payload_remark_optional_at_schema_level() -> None:
    assert RejectPayload.model_validate({}).remark is None


def test_reject_payload_remark_max_length() -> None:
    with pytest.raises(ValidationError):
        RejectPayload(remark="x" * 2001)


def test_resubmit_payload_accepts_camel_case_updated_data() -> None:
    p = ResubmitPayload.model_validate({"response": "Fixed", "updatedData": {"salary": {"basic": 5500}}})
    assert p.updated_data == {"salary": {"basic": 5500}}
