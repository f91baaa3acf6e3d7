# clinic/services/scheduling.py
from typing import Optional

from clinic.config import settings
from clinic.models.all_models import AppointmentStatus

class StatusTransitionError(ValueError):
    """Raised when strict transitions are enabled and a change moves backwards."""

# Forward moves allowed in strict mode. Terminal statuses map to nothing.
FORWARD_TRANSITIONS = {
    AppointmentStatus.SCHEDULED: {
        AppointmentStatus.CONFIRMED, AppointmentStatus.IN_PROGRESS,
        AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW,
    },
    AppointmentStatus.CONFIRMED: {
        AppointmentStatus.IN_PROGRESS, AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW,
    },
    AppointmentStatus.IN_PROGRESS: {
        AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED,
    },
    AppointmentStatus.COMPLETED: set(),
    AppointmentStatus.CANCELLED: set(),
    AppointmentStatus.NO_SHOW: set(),
}

def check_status_change(
    current: AppointmentStatus,
    new: AppointmentStatus,
    strict: Optional[bool] = None
) -> AppointmentStatus:
    """
    Validate a status change and return the new status.

    By default any of the six statuses may be set from any other one.
    With STRICT_STATUS_TRANSITIONS enabled only FORWARD_TRANSITIONS are accepted;
    setting the same status again is always a no-op.
    """
    current = AppointmentStatus(current)
    new = AppointmentStatus(new)
    if strict is None:
        strict = settings.STRICT_STATUS_TRANSITIONS
    if not strict or new == current:
        return new
    if new not in FORWARD_TRANSITIONS[current]:
        raise StatusTransitionError(
            f"Cannot change appointment status from {current.value} to {new.value}"
        )
    return new
