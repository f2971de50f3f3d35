"""
Domain exceptions raised by service functions.

Views translate these into HTTP responses; services never build responses.
"""


class DomainError(Exception):
    """Base class for business-rule failures."""
    pass


class RecordNotFoundError(DomainError):
    """Raised when a live record with the given id does not exist."""

    def __init__(self, entity, record_id):
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} with ID {record_id} not found")


class ClinicHasMembersError(DomainError):
    """Raised when soft-deleting a clinic that still has live users."""

    def __init__(self, clinic_id, member_count):
        self.clinic_id = clinic_id
        self.member_count = member_count
        super().__init__(
            f"Cannot delete clinic with ID {clinic_id} because it has {member_count} "
            f"registered users. Please remove or reassign all users before deleting the clinic."
        )


class InvalidStatusError(DomainError):
    """Raised when an appointment status is outside the allowed set."""

    def __init__(self, status, allowed):
        self.status = status
        self.allowed = list(allowed)
        super().__init__(
            f"Invalid status '{status}'. Allowed: {', '.join(self.allowed)}"
        )


class InvalidPayloadError(DomainError):
    """Raised when a record payload cannot be written (bad id, missing field)."""
    pass
