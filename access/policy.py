# EduFam Access - policy composer (platform > owner > school > relationship)
import logging

from .capability import classify
from .models import (
    Actor,
    CapabilityClass,
    Decision,
    DecisionReason,
    GrantScope,
    Operation,
    ResourceDescriptor,
)
from .relations import RelationStore, resolve_relation_ids
from .resources import ResourceDomain, ResourceScope, ResourceType, get_resource_type
from .schools import GrantStore, resolve_schools

logger = logging.getLogger(__name__)


async def decide(
    actor: Actor,
    resource: ResourceDescriptor,
    operation: Operation | str,
    grants: GrantStore,
    relations: RelationStore,
) -> Decision:
    """
    First matching rule wins:
      1. platform-super                          -> allow
      2. platform-admin on an admin-gated type   -> allow
      3. user-owned resource owned by the actor  -> allow
      4. resource school in the actor's schools  -> allow (subject to director grant scope)
      5. relationship link to the resource       -> allow, read operations only
      6. deny
    Lookup failures from the stores propagate unchanged.
    """
    capability = classify(actor)
    op = Operation.parse(operation)

    if capability is CapabilityClass.PLATFORM_SUPER:
        return Decision.allow(DecisionReason.PLATFORM_OVERRIDE)

    rtype = get_resource_type(resource.resource_type)
    if rtype is None:
        logger.warning("unknown resource type %r denied for actor %s", resource.resource_type, actor.id)
        return Decision.deny()
    if capability is CapabilityClass.ANONYMOUS:
        return Decision.deny()

    if capability is CapabilityClass.PLATFORM_ADMIN and rtype.admin_gated:
        return Decision.allow(DecisionReason.PLATFORM_OVERRIDE)

    if rtype.scope is ResourceScope.USER:
        if resource.owner_id and resource.owner_id == actor.id:
            return Decision.allow(DecisionReason.OWNER_MATCH)
        return Decision.deny()

    if rtype.scope is ResourceScope.PLATFORM:
        return Decision.deny()

    if not resource.school_id:
        logger.warning(
            "school-scoped resource %r described without school_id; denying", resource.resource_type
        )
        return Decision.deny()

    schools = await resolve_schools(actor, grants)
    if resource.school_id in schools:
        if _grant_permits(schools.scope_for(resource.school_id), rtype, op):
            return Decision.allow(DecisionReason.SCHOOL_MATCH)

    ids = await resolve_relation_ids(actor, capability, rtype.name, relations)
    if ids:
        relevant = resource.relevant_id(rtype.relation)
        if relevant is not None and relevant in ids:
            # Relationship access never widens write permissions.
            if op is not None and op.is_read:
                return Decision.allow(DecisionReason.RELATIONSHIP_MATCH)
            logger.info("write through relationship path denied: actor=%s type=%s", actor.id, rtype.name)

    return Decision.deny()


def _grant_permits(scope: GrantScope | None, rtype: ResourceType, op: Operation | None) -> bool:
    if scope is None or scope is GrantScope.FULL:
        return True
    if op is not None and op.is_read:
        return True
    if scope is GrantScope.FINANCIAL_ONLY:
        return rtype.domain is ResourceDomain.FINANCIAL
    if scope is GrantScope.ACADEMIC_ONLY:
        return rtype.domain is ResourceDomain.ACADEMIC
    return False
