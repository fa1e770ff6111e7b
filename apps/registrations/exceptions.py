"""Expected outcomes of registration operations."""

from rest_framework import status

from core.exceptions import BusinessError


class RegistrationValidationError(BusinessError):
    code = 'validation_error'
    message = 'Registration details are invalid'
    http_status = status.HTTP_400_BAD_REQUEST


class RegistrationNotFound(BusinessError):
    code = 'not_found'
    message = 'No registration found with this ticket ID'
    http_status = status.HTTP_404_NOT_FOUND


class AlreadyCheckedIn(BusinessError):
    code = 'already_checked_in'
    message = 'This ticket has already been checked in'
    http_status = status.HTTP_409_CONFLICT


class PaymentPending(BusinessError):
    code = 'payment_pending'
    message = 'Payment for this ticket is still pending; it cannot be checked in'
    http_status = status.HTTP_409_CONFLICT


class RegistrationNotCheckable(BusinessError):
    code = 'not_checkable'
    message = 'This registration is cancelled and cannot be checked in'
    http_status = status.HTTP_409_CONFLICT


class InvalidTransition(BusinessError):
    code = 'invalid_transition'
    message = 'This registration cannot move to the requested state'
    http_status = status.HTTP_409_CONFLICT


class StaleRegistrationState(InvalidTransition):
    """The registration changed between reading it and the guarded update."""

    code = 'stale_state'
    message = 'This registration was updated by another request; reload and try again'
