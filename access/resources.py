# EduFam Access - resource type registry (scope, domain, relationship readers)
from dataclasses import dataclass
from enum import Enum

from .models import CapabilityClass


class ResourceScope(str, Enum):
    SCHOOL = "school"      # row carries school_id
    USER = "user"          # row belongs to one user, no school
    PLATFORM = "platform"  # platform-global, admin only


class ResourceDomain(str, Enum):
    ACADEMIC = "academic"
    FINANCIAL = "financial"
    GENERAL = "general"


RELATION_STUDENT = "student"


@dataclass(frozen=True)
class ResourceType:
    """Declared once per resource type; the engine never looks at business tables."""
    name: str
    scope: ResourceScope
    domain: ResourceDomain = ResourceDomain.GENERAL
    relation: str | None = None
    relationship_readers: frozenset[CapabilityClass] = frozenset()
    admin_gated: bool = False


def _school(name, domain=ResourceDomain.GENERAL, readers=()):
    relation = RELATION_STUDENT if readers else None
    return ResourceType(name, ResourceScope.SCHOOL, domain, relation, frozenset(readers))


def _user(name):
    return ResourceType(name, ResourceScope.USER, admin_gated=True)


def _platform(name):
    return ResourceType(name, ResourceScope.PLATFORM, admin_gated=True)


_PARENT = CapabilityClass.PARENT
_TEACHER = CapabilityClass.TEACHER

# Resource ids callers use most
RESOURCE_STUDENTS = "students"
RESOURCE_GRADES = "grades"
RESOURCE_STAFF = "staff"
RESOURCE_USERS = "users"
RESOURCE_AUDIT_LOGS = "audit_logs"
RESOURCE_DIRECTOR_GRANTS = "director_school_access"

_TYPES: list[ResourceType] = [
    # Students and everything hanging off one student
    _school(RESOURCE_STUDENTS, ResourceDomain.ACADEMIC, (_PARENT, _TEACHER)),
    _school(RESOURCE_GRADES, ResourceDomain.ACADEMIC, (_PARENT, _TEACHER)),
    _school("attendance_records", ResourceDomain.ACADEMIC, (_PARENT, _TEACHER)),
    _school("assessments", ResourceDomain.ACADEMIC, (_PARENT, _TEACHER)),
    _school("certificates_issued", ResourceDomain.ACADEMIC, (_PARENT,)),
    _school("enrollments", ResourceDomain.ACADEMIC, (_PARENT,)),
    _school("fee_assignments", ResourceDomain.FINANCIAL, (_PARENT,)),
    _school("invoices", ResourceDomain.FINANCIAL, (_PARENT,)),
    _school("payments", ResourceDomain.FINANCIAL, (_PARENT,)),
    _school("mpesa_transactions", ResourceDomain.FINANCIAL, (_PARENT,)),
    # School-wide academic data
    _school("classes", ResourceDomain.ACADEMIC),
    _school("subjects", ResourceDomain.ACADEMIC),
    _school("academic_years", ResourceDomain.ACADEMIC),
    _school("academic_terms", ResourceDomain.ACADEMIC),
    _school("timetable_entries", ResourceDomain.ACADEMIC),
    _school("classrooms", ResourceDomain.ACADEMIC),
    # School-wide financial data
    _school("fees", ResourceDomain.FINANCIAL),
    _school("fee_structures", ResourceDomain.FINANCIAL),
    _school("transport_fees", ResourceDomain.FINANCIAL),
    _school("payroll", ResourceDomain.FINANCIAL),
    _school("expenses", ResourceDomain.FINANCIAL),
    # Everything else that is school scoped
    _school(RESOURCE_STAFF),
    _school("departments"),
    _school("announcements"),
    _school("vehicles"),
    _school("routes"),
    _school("drivers"),
    _school("performance_reviews"),
    _school("leave_applications"),
    _school("assets"),
    # Personal data
    _user(RESOURCE_USERS),
    _user("user_sessions"),
    _user("password_reset_tokens"),
    _user("file_uploads"),
    _user("user_language_preferences"),
    _user("mobile_devices"),
    _user("mobile_app_sessions"),
    # Platform administration
    _platform("platform_admins"),
    _platform("platform_settings"),
    _platform("platform_metrics"),
    _platform("admin_employees"),
    _platform("admin_departments"),
    _platform("admin_performance_reviews"),
    _platform("admin_employee_leaves"),
    _platform("system_settings"),
    _platform(RESOURCE_AUDIT_LOGS),
    _platform("security_audit_logs"),
    _platform("compliance_assessments"),
    _platform("feature_flags"),
    _platform("maintenance_mode"),
    _platform("system_health_checks"),
    _platform(RESOURCE_DIRECTOR_GRANTS),
]

RESOURCE_TYPES: dict[str, ResourceType] = {}


def get_resource_type(name: str | None) -> ResourceType | None:
    if not name:
        return None
    return RESOURCE_TYPES.get(name)


_RELATIONSHIP_CAPABILITIES = frozenset({_PARENT, _TEACHER})


def register_resource_type(resource_type: ResourceType) -> None:
    """Add a resource type at startup. Re-registering a name with a different shape is refused."""
    if resource_type.relationship_readers:
        if resource_type.scope is not ResourceScope.SCHOOL:
            raise ValueError("Relationship readers only apply to school-scoped resource types")
        if resource_type.relation != RELATION_STUDENT:
            raise ValueError(f"Relationship readers need relation={RELATION_STUDENT!r}")
        if not resource_type.relationship_readers <= _RELATIONSHIP_CAPABILITIES:
            raise ValueError("Only parents and teachers read through relationships")
    existing = RESOURCE_TYPES.get(resource_type.name)
    if existing is not None and existing != resource_type:
        raise ValueError(f"Resource type {resource_type.name!r} already registered with a different shape")
    RESOURCE_TYPES[resource_type.name] = resource_type


for _type in _TYPES:
    register_resource_type(_type)
del _type
