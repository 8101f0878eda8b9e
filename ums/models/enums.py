from __future__ import annotations

import enum


class Role(enum.StrEnum):
    """Capability set of an authenticated principal."""

    USER = "USER"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"


class RequestType(enum.StrEnum):
    """Kind of change a request proposes. Fixed at creation."""

    LEAVE = "LEAVE"
    OUTPASS = "OUTPASS"
    SALARY = "SALARY"
    PROFILE_UPDATE = "PROFILE_UPDATE"


class RequestStatus(enum.StrEnum):
    """State machine for change requests."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class MergeStatus(enum.StrEnum):
    """Whether an approved request has been applied to the target profile."""

    NOT_APPLICABLE = "NOT_APPLICABLE"
    PENDING = "PENDING"
    APPLIED = "APPLIED"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"


class ProfileSection(enum.StrEnum):
    """Section names as they appear in the API and in PROFILE_UPDATE payloads."""

    PERSONAL = "personal"
    FAMILY = "family"
    EDUCATION = "education"
    MEDICAL = "medical"
    OTHERS = "others"
    LEAVE = "leave"
    SALARY = "salary"
    DOCUMENTS = "documents"

    @property
    def column(self) -> str:
        """Name of the ``user_profile`` column backing this section."""
        return _SECTION_COLUMNS[self]


_SECTION_COLUMNS = {
    ProfileSection.PERSONAL: "personal_details",
    ProfileSection.FAMILY: "family",
    ProfileSection.EDUCATION: "education",
    ProfileSection.MEDICAL: "medical",
    ProfileSection.OTHERS: "others",
    ProfileSection.LEAVE: "leave_data",
    ProfileSection.SALARY: "salary_data",
    ProfileSection.DOCUMENTS: "documents",
}

# Sections a PROFILE_UPDATE request may target. Documents are only written directly.
REQUESTABLE_SECTIONS = frozenset(
    {
        ProfileSection.PERSONAL,
        ProfileSection.FAMILY,
        ProfileSection.EDUCATION,
        ProfileSection.MEDICAL,
        ProfileSection.OTHERS,
        ProfileSection.LEAVE,
        ProfileSection.SALARY,
    }
)


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    REQUEST = "REQUEST"
    PROFILE = "PROFILE"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    RESUBMIT = "RESUBMIT"
    MERGE = "MERGE"
    MERGE_SKIPPED = "MERGE_SKIPPED"
    MERGE_FAILED = "MERGE_FAILED"
