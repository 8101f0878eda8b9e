from __future__ import annotations

import uuid

from ums.models import AuditLog, ChangeRequest, SQLModel, UserProfile
from ums.models.enums import MergeStatus, ProfileSection, RequestStatus

EXPECTED_TABLES = {
    "audit_log",
    "change_request",
    "user_profile",
}


def test_all_tables_registered() -> None:
    table_names = set(SQLModel.metadata.tables.keys())
    assert EXPECTED_TABLES.issubset(table_names)


def test_change_request_defaults() -> None:
    request = ChangeRequest(
        type="LEAVE",
        data={"userId": str(uuid.uuid4()), "leave": {}},
        user_id=uuid.uuid4(),
        requester_id=uuid.uuid4(),
    )
    assert request.id is not None
    assert request.status == RequestStatus.PENDING
    assert request.merge_status == MergeStatus.NOT_APPLICABLE
    assert request.merge_attempts == 0
    assert request.admin_remark is None
    assert request.manager_response is None
    assert request.decided_at is None


def test_user_profile_sections_default_to_null() -> None:
    profile = UserProfile(user_id=uuid.uuid4())
    for section in ProfileSection:
        assert getattr(profile, section.column) is None


def test_user_profile_has_column_for_every_section() -> None:
    columns = set(SQLModel.metadata.tables["user_profile"].columns.keys())
    assert {s.column for s in ProfileSection} <= columns


def test_profile_section_columns() -> None:
    assert ProfileSection.PERSONAL.column == "personal_details"
    assert ProfileSection.LEAVE.column == "leave_data"
    assert ProfileSection.SALARY.column == "salary_data"
    assert ProfileSection.MEDICAL.column == "medical"


def test_audit_log_instantiation() -> None:
    entry = AuditLog(
        actor_id=uuid.uuid4(),
        entity_type="REQUEST",
        entity_id=uuid.uuid4(),
        action="APPROVE",
        before_json={"status": "PENDING"},
        after_json={"status": "APPROVED"},
    )
    assert entry.id is not None
    assert entry.after_json == {"status": "APPROVED"}


def test_json_columns_nullable() -> None:
    table = SQLModel.metadata.tables["user_profile"]
    assert table.c.medical.nullable
    assert not SQLModel.metadata.tables["change_request"].c.data.nullable
