# EduFam Access - decision engine value objects
from datetime import datetime
from enum import Enum
from typing import Any
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .clock import as_naive_utc, utcnow


# --- Roles (closed enumeration of what the platform issues) ---
class Role(str, Enum):
    super_admin = "super_admin"
    edufam_admin = "edufam_admin"
    engineer = "engineer"
    admin_finance = "admin_finance"
    support_hr = "support_hr"
    sales_marketing = "sales_marketing"
    school_director = "school_director"
    principal = "principal"
    teacher = "teacher"
    parent = "parent"
    hr = "hr"
    finance = "finance"
    driver = "driver"
    cleaner = "cleaner"
    chef = "chef"
    gardener = "gardener"
    watchman = "watchman"
    nurse = "nurse"
    secretary = "secretary"
    lab_technician = "lab_technician"
    librarian = "librarian"


class CapabilityClass(str, Enum):
    PLATFORM_SUPER = "platform_super"
    PLATFORM_ADMIN = "platform_admin"
    SCHOOL_DIRECTOR = "school_director"
    TEACHER = "teacher"
    PARENT = "parent"
    STANDARD_USER = "standard_user"
    ANONYMOUS = "anonymous"


# --- Actor (who is asking) ---
class Actor(BaseModel):
    """Authenticated party reduced to what a decision needs. Built once per request."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="User id")
    role: str | None = Field(default=None, description="Raw role string; classify() interprets it")
    home_school_id: str | None = Field(default=None, description="School the user belongs to, if any")
    resolved_at: datetime = Field(default_factory=utcnow, description="When role/school were read")


# --- Operations ---
class Operation(str, Enum):
    READ = "read"
    LIST = "list"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def is_read(self) -> bool:
        return self in READ_OPERATIONS

    @classmethod
    def parse(cls, value: "Operation | str | None") -> "Operation | None":
        """Return the matching operation or None; callers treat None as a write."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return None


READ_OPERATIONS = frozenset({Operation.READ, Operation.LIST})


# --- Resource descriptor (what is being touched) ---
class ResourceDescriptor(BaseModel):
    """Access-relevant facts about one record, populated by the owning controller."""
    model_config = ConfigDict(frozen=True)

    resource_type: str
    school_id: str | None = None
    owner_ids_by_relation: dict[str, str] = Field(
        default_factory=dict,
        description="relation name -> id, e.g. {'student': 'st-1'} or {'owner': 'u-9'}",
    )

    @property
    def owner_id(self) -> str | None:
        return self.owner_ids_by_relation.get("owner")

    @property
    def student_id(self) -> str | None:
        return self.owner_ids_by_relation.get("student")

    @property
    def class_id(self) -> str | None:
        return self.owner_ids_by_relation.get("class")

    def relevant_id(self, relation: str | None) -> str | None:
        if relation is None:
            return None
        return self.owner_ids_by_relation.get(relation)


# --- Director grants ---
class GrantScope(str, Enum):
    FULL = "full"
    READ_ONLY = "read_only"
    FINANCIAL_ONLY = "financial_only"
    ACADEMIC_ONLY = "academic_only"


class SchoolGrant(BaseModel):
    director_id: str
    school_id: str
    is_active: bool = True
    scope: GrantScope = GrantScope.FULL
    expires_at: datetime | None = None

    @field_validator("expires_at")
    @classmethod
    def naive_expiry(cls, value: datetime | None) -> datetime | None:
        return as_naive_utc(value)

    def is_live(self, now: datetime | None = None) -> bool:
        if not self.is_active:
            return False
        if self.expires_at is None:
            return True
        return self.expires_at > (now or utcnow())


class ParentChildLink(BaseModel):
    parent_id: str
    student_id: str


class TeacherClassLink(BaseModel):
    teacher_id: str
    class_id: str


# --- Decisions ---
class DecisionReason(str, Enum):
    PLATFORM_OVERRIDE = "platform-override"
    OWNER_MATCH = "owner-match"
    SCHOOL_MATCH = "school-match"
    RELATIONSHIP_MATCH = "relationship-match"
    NO_MATCHING_RULE = "no-matching-rule"


class Decision(BaseModel):
    allowed: bool
    reason: DecisionReason
    trace_id: str | None = None

    @classmethod
    def allow(cls, reason: DecisionReason) -> "Decision":
        return cls(allowed=True, reason=reason)

    @classmethod
    def deny(cls) -> "Decision":
        return cls(allowed=False, reason=DecisionReason.NO_MATCHING_RULE)


class AccessLevel(str, Enum):
    ADMIN_OVERRIDE = "admin-override"
    HOME_SCHOOL = "home-school"
    DIRECTOR_GRANT = "director-grant"
    NONE = "none"


class SchoolAccess(BaseModel):
    """Answer of validate_school_access; access_level is for audit/logging."""
    has_access: bool
    access_level: AccessLevel


# --- Audit record for every decision ---
class DecisionAuditEntry(BaseModel):
    trace_id: str
    actor_id: str
    role: str | None = None
    capability: CapabilityClass
    resource_type: str
    school_id: str | None = None
    operation: str
    allowed: bool
    reason: DecisionReason
    timestamp: datetime = Field(default_factory=utcnow)
    details: dict[str, Any] = Field(default_factory=dict)
