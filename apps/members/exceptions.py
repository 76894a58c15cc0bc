"""
Typed errors raised by the member, enrollment and e-card services.

Every error carries a stable ``code``, an optional ``field`` and a
human-readable ``message`` so the API layer can render
``{"code", "field", "message"}`` payloads without parsing strings.
"""


class EnrollmentError(Exception):
    code = 'enrollment_error'
    http_status = 400
    retryable = False
    default_message = 'Enrollment operation failed'

    def __init__(self, message=None, field=None):
        self.message = message or self.default_message
        self.field = field
        super().__init__(self.message)

    def as_dict(self):
        return {'code': self.code, 'field': self.field, 'message': self.message}


class ValidationFailed(EnrollmentError):
    """One or more field rules failed; the caller re-prompts for those fields."""

    code = 'validation_failed'
    retryable = True
    default_message = 'Some details are invalid'

    def __init__(self, errors, message=None):
        self.errors = list(errors)
        super().__init__(message)

    @property
    def fields(self):
        return [error.field for error in self.errors]

    def as_dict(self):
        payload = super().as_dict()
        payload['errors'] = [error.as_dict() for error in self.errors]
        return payload


class DuplicateSlot(EnrollmentError):
    code = 'duplicate_slot'
    http_status = 409
    default_message = 'This relation slot is already occupied for the plan'


class MemberLocked(EnrollmentError):
    code = 'member_locked'
    http_status = 409
    default_message = 'This information cannot be changed'


class MemberNotLocked(EnrollmentError):
    code = 'member_not_locked'
    http_status = 409
    default_message = 'Member details must be confirmed before an E-Card can be issued'


class CardAlreadyIssued(EnrollmentError):
    code = 'card_already_issued'
    http_status = 409
    default_message = 'An E-Card already exists for this member'


class PlanExpired(EnrollmentError):
    code = 'plan_expired'
    http_status = 409
    default_message = 'The plan purchase has expired'


class NotFound(EnrollmentError):
    """Stale reference: the caller should refresh its view instead of retrying."""

    code = 'not_found'
    http_status = 404
    default_message = 'Record not found'


class AcknowledgmentRequired(EnrollmentError):
    code = 'acknowledgment_required'
    retryable = True
    default_message = 'Please confirm these details are accurate and cannot be changed'
