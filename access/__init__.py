# EduFam Access - authorization decision engine
from .models import (
    Actor,
    Role,
    CapabilityClass,
    Operation,
    ResourceDescriptor,
    GrantScope,
    SchoolGrant,
    ParentChildLink,
    TeacherClassLink,
    Decision,
    DecisionReason,
    AccessLevel,
    SchoolAccess,
    DecisionAuditEntry,
)
from .capability import classify
from .schools import GrantStore, SchoolSet, resolve_schools
from .relations import RelationStore, NOT_APPLICABLE, resolve_relation_ids
from .policy import decide
from .engine import AccessEngine
from .errors import (
    AccessError,
    AccessDenied,
    LookupFailure,
    GrantLookupError,
    RelationshipLookupError,
    GrantError,
    GrantPermissionError,
    GrantValidationError,
)

__all__ = [
    "Actor",
    "Role",
    "CapabilityClass",
    "Operation",
    "ResourceDescriptor",
    "GrantScope",
    "SchoolGrant",
    "ParentChildLink",
    "TeacherClassLink",
    "Decision",
    "DecisionReason",
    "AccessLevel",
    "SchoolAccess",
    "DecisionAuditEntry",
    "classify",
    "GrantStore",
    "SchoolSet",
    "resolve_schools",
    "RelationStore",
    "NOT_APPLICABLE",
    "resolve_relation_ids",
    "decide",
    "AccessEngine",
    "AccessError",
    "AccessDenied",
    "LookupFailure",
    "GrantLookupError",
    "RelationshipLookupError",
    "GrantError",
    "GrantPermissionError",
    "GrantValidationError",
]
