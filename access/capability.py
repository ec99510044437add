# EduFam Access - capability classifier (the only place role strings are read)
from .models import Actor, CapabilityClass, Role

_ROLE_CAPABILITIES: dict[str, CapabilityClass] = {
    Role.super_admin.value: CapabilityClass.PLATFORM_SUPER,
    Role.edufam_admin.value: CapabilityClass.PLATFORM_SUPER,
    Role.engineer.value: CapabilityClass.PLATFORM_ADMIN,
    Role.admin_finance.value: CapabilityClass.PLATFORM_ADMIN,
    Role.support_hr.value: CapabilityClass.PLATFORM_ADMIN,
    Role.sales_marketing.value: CapabilityClass.PLATFORM_ADMIN,
    Role.school_director.value: CapabilityClass.SCHOOL_DIRECTOR,
    Role.teacher.value: CapabilityClass.TEACHER,
    Role.parent.value: CapabilityClass.PARENT,
    Role.principal.value: CapabilityClass.STANDARD_USER,
    Role.hr.value: CapabilityClass.STANDARD_USER,
    Role.finance.value: CapabilityClass.STANDARD_USER,
    Role.driver.value: CapabilityClass.STANDARD_USER,
    Role.cleaner.value: CapabilityClass.STANDARD_USER,
    Role.chef.value: CapabilityClass.STANDARD_USER,
    Role.gardener.value: CapabilityClass.STANDARD_USER,
    Role.watchman.value: CapabilityClass.STANDARD_USER,
    Role.nurse.value: CapabilityClass.STANDARD_USER,
    Role.secretary.value: CapabilityClass.STANDARD_USER,
    Role.lab_technician.value: CapabilityClass.STANDARD_USER,
    Role.librarian.value: CapabilityClass.STANDARD_USER,
}

PLATFORM_CAPABILITIES = frozenset({CapabilityClass.PLATFORM_SUPER, CapabilityClass.PLATFORM_ADMIN})


def classify(actor: Actor | None) -> CapabilityClass:
    """Map an actor's role to its capability class. Unknown or missing roles are anonymous."""
    if actor is None or not actor.id:
        return CapabilityClass.ANONYMOUS
    role = actor.role
    if isinstance(role, Role):
        role = role.value
    if not isinstance(role, str):
        return CapabilityClass.ANONYMOUS
    return _ROLE_CAPABILITIES.get(role.strip(), CapabilityClass.ANONYMOUS)


def is_platform(capability: CapabilityClass) -> bool:
    return capability in PLATFORM_CAPABILITIES
