"""
Commission domain exceptions.

Every error carries a human-readable message and a machine-readable code
so that the API layer can map it to a response without string matching.
"""


class CommissionError(Exception):
    """Base class for commission workflow errors."""

    code = "commission_error"

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, object]:
        """Serialize for API responses and audit details."""
        return {"code": self.code, "message": self.message, **self.context}


class NotFoundError(CommissionError):
    """Deal, user or payment does not exist."""

    code = "not_found"


class InvalidStateError(CommissionError):
    """Operation attempted from a state that does not allow it."""

    code = "invalid_state"


class AlreadyDistributedError(CommissionError):
    """Deal already has an active commission distribution."""

    code = "already_distributed"


class ValidationError(CommissionError):
    """Invalid input such as a missing or non-positive gross amount."""

    code = "validation_error"


class HierarchyIntegrityError(ValidationError):
    """Partner hierarchy contains or would contain a cycle."""

    code = "hierarchy_integrity"
