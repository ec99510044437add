# EduFam Access - decision API used by resource controllers
import logging
import uuid

from .audit import log_decision
from .capability import classify
from .errors import AccessDenied
from .models import (
    AccessLevel,
    Actor,
    Decision,
    DecisionAuditEntry,
    GrantScope,
    Operation,
    ResourceDescriptor,
    SchoolAccess,
)
from .policy import decide
from .relations import RelationStore
from .schools import GrantStore, resolve_schools, scope_satisfies

logger = logging.getLogger(__name__)


class AccessEngine:
    """
    Answers "can this actor do X to resource Y" and "may this actor act in school S".

    Build one per request around that request's stores. The engine holds no state of
    its own, so a revoked grant or removed link shows up on the very next call.
    """

    def __init__(self, grants: GrantStore, relations: RelationStore):
        self.grants = grants
        self.relations = relations

    async def can_access(
        self,
        actor: Actor,
        resource: ResourceDescriptor,
        operation: Operation | str,
        trace_id: str | None = None,
    ) -> Decision:
        trace_id = trace_id or f"tr-{uuid.uuid4().hex[:12]}"
        decision = await decide(actor, resource, operation, self.grants, self.relations)
        decision = decision.model_copy(update={"trace_id": trace_id})
        op = Operation.parse(operation)
        log_decision(DecisionAuditEntry(
            trace_id=trace_id,
            actor_id=actor.id,
            role=actor.role,
            capability=classify(actor),
            resource_type=resource.resource_type,
            school_id=resource.school_id,
            operation=op.value if op else str(operation),
            allowed=decision.allowed,
            reason=decision.reason,
        ))
        if not decision.allowed and resource.school_id and resource.school_id != actor.home_school_id:
            logger.warning(
                "cross-tenant access attempt: actor=%s school=%s type=%s trace=%s",
                actor.id, resource.school_id, resource.resource_type, trace_id,
            )
        return decision

    async def ensure(
        self,
        actor: Actor,
        resource: ResourceDescriptor,
        operation: Operation | str,
    ) -> Decision:
        """can_access that raises AccessDenied instead of returning a deny."""
        decision = await self.can_access(actor, resource, operation)
        if not decision.allowed:
            raise AccessDenied(decision.trace_id)
        return decision

    async def validate_school_access(
        self,
        actor: Actor,
        school_id: str | None,
        required_scope: GrantScope = GrantScope.READ_ONLY,
    ) -> SchoolAccess:
        """Coarse check before any specific resource is loaded."""
        if not school_id:
            return SchoolAccess(has_access=False, access_level=AccessLevel.NONE)
        schools = await resolve_schools(actor, self.grants)
        if school_id not in schools or not scope_satisfies(schools.scope_for(school_id), required_scope):
            return SchoolAccess(has_access=False, access_level=AccessLevel.NONE)
        return SchoolAccess(has_access=True, access_level=schools.access_level)

    async def accessible_schools(self, actor: Actor):
        return await resolve_schools(actor, self.grants)
