# EduFam Access - errors raised by the engine and its stores
class AccessError(Exception):
    """Base class for everything the access layer raises."""


class LookupFailure(AccessError):
    """Grant or relationship data could not be read. Never means allow or deny."""


class GrantLookupError(LookupFailure):
    pass


class RelationshipLookupError(LookupFailure):
    pass


class AccessDenied(AccessError):
    """Raised by AccessEngine.ensure. The message is always the generic one."""

    def __init__(self, trace_id: str | None = None):
        super().__init__("Access denied")
        self.trace_id = trace_id


class GrantError(AccessError):
    pass


class GrantPermissionError(GrantError):
    pass


class GrantValidationError(GrantError):
    pass
