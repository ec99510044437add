# EduFam Access - relationship resolver (parent -> children, teacher -> class rosters)
from typing import Iterable, Protocol

from .models import Actor, CapabilityClass, ParentChildLink, TeacherClassLink
from .resources import RELATION_STUDENT, get_resource_type


class RelationStore(Protocol):
    async def parent_links(self, parent_id: str) -> list[ParentChildLink]:
        """Parent-child links derived from enrollment records."""
        ...

    async def teacher_links(self, teacher_id: str) -> list[TeacherClassLink]:
        """The teacher's active class assignments."""
        ...

    async def roster(self, class_ids: Iterable[str]) -> set[str]:
        """Student ids currently enrolled in any of the given classes."""
        ...


class _NotApplicable:
    __slots__ = ()

    def __repr__(self) -> str:
        return "NOT_APPLICABLE"

    def __bool__(self) -> bool:
        return False


NOT_APPLICABLE = _NotApplicable()


async def resolve_relation_ids(
    actor: Actor,
    capability: CapabilityClass,
    resource_type: str,
    relations: RelationStore,
) -> frozenset[str] | _NotApplicable:
    """
    Ids reachable through relationship links for this (capability, resource type).
    NOT_APPLICABLE tells the policy composer to skip relationship access entirely.
    """
    rtype = get_resource_type(resource_type)
    if rtype is None or rtype.relation != RELATION_STUDENT:
        return NOT_APPLICABLE
    if capability not in rtype.relationship_readers:
        return NOT_APPLICABLE
    if capability is CapabilityClass.PARENT:
        links = await relations.parent_links(actor.id)
        return frozenset(link.student_id for link in links if link.parent_id == actor.id)
    if capability is CapabilityClass.TEACHER:
        links = await relations.teacher_links(actor.id)
        class_ids = {link.class_id for link in links if link.teacher_id == actor.id}
        if not class_ids:
            return frozenset()
        return frozenset(await relations.roster(class_ids))
    return NOT_APPLICABLE
