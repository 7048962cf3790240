"""Exception hierarchy of the phase-space engine.

Hard failures raise one of these; soft edge cases are logged and normalised
to sentinel values by the callers instead.
"""


class NuphaseError(Exception):
    """Base class for engine errors."""

    pass


class UnsupportedChannel(NuphaseError):
    """No kinematic formula is defined for the requested process."""

    pass


class UnresolvedChannel(UnsupportedChannel):
    """The exclusive tag does not pin down the final state of the channel."""

    pass


class NumericalError(NuphaseError):
    """A closed-form kinematic expression evaluated to NaN."""

    pass


class KinematicsGenerationFailure(NuphaseError):
    """Recoverable failure while generating kinematics for one event.

    The enclosing generation loop should abandon the event and, when
    ``fast_forward`` is set, move on to the next attempt.
    """

    def __init__(self, reason: str, fast_forward: bool = True):
        super().__init__(reason)
        self.reason = reason
        self.fast_forward = fast_forward


class InvariantViolation(NuphaseError):
    """A realised cross section exceeded the cached rejection bound."""

    def __init__(self, message: str, xsec: float = float("nan"), xsec_max: float = float("nan")):
        super().__init__(message)
        self.xsec = xsec
        self.xsec_max = xsec_max
