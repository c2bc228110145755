from app.errors import InvalidTransition

PENDING = "pending"
CONFIRMED = "confirmed"
CANCELLED = "cancelled"
BOOKING_STATUSES = (PENDING, CONFIRMED, CANCELLED)

BOOKING_TRANSITIONS = {
    PENDING: {CONFIRMED, CANCELLED},
    CONFIRMED: {CANCELLED},
    CANCELLED: set(),
}

# Edges that need evidence beyond the request itself.
ASSIGNMENT_GATED = {(PENDING, CONFIRMED)}


class TransitionEngine:
    """Validates booking status changes.

    ``pending -> confirmed`` is gated on a driver assignment. A manual
    confirmation (no driver) is accepted only when the engine was built with
    ``allow_manual_confirmation=True`` and the caller asks for it explicitly.
    """

    def __init__(self, allow_manual_confirmation=False):
        self.allow_manual_confirmation = allow_manual_confirmation

    def can_transition(self, current, target, via_assignment=False, manual=False):
        try:
            self.check(current, target, via_assignment=via_assignment, manual=manual)
        except InvalidTransition:
            return False
        return True

    def check(self, current, target, via_assignment=False, manual=False):
        current = (current or "").strip().lower()
        target = (target or "").strip().lower()
        if current not in BOOKING_STATUSES or target not in BOOKING_STATUSES:
            raise InvalidTransition(current or None, target or None)
        if current == target:
            return target
        if target not in BOOKING_TRANSITIONS[current]:
            raise InvalidTransition(current, target)
        if (current, target) in ASSIGNMENT_GATED:
            manual_ok = manual and self.allow_manual_confirmation
            if not via_assignment and not manual_ok:
                raise InvalidTransition(current, target)
        return target

    def apply(self, booking, target, via_assignment=False, manual=False):
        """Set ``booking.status`` to ``target``; returns True when it changed."""
        current = booking.status
        target = self.check(current, target, via_assignment=via_assignment, manual=manual)
        if current == target:
            return False
        booking.status = target
        return True

    @staticmethod
    def sources_for(target, via_assignment=False):
        """Statuses from which ``target`` is reachable, ``target`` included."""
        sources = {target}
        for source, targets in BOOKING_TRANSITIONS.items():
            if target not in targets:
                continue
            if (source, target) in ASSIGNMENT_GATED and not via_assignment:
                continue
            sources.add(source)
        return sources
