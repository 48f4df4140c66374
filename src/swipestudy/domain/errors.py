"""Error taxonomy for the study core.

None of these are fatal to the process: the worst case is a session that
cannot start or an item left pending.
"""


class SwipeStudyError(Exception):
    """Base class for all SwipeStudy errors."""


class GenerationError(SwipeStudyError):
    """Card or question generation failed. The session is not started."""


class GradingError(SwipeStudyError):
    """A single answer could not be evaluated. The item stays pending and may be resubmitted."""


class SessionStateError(SwipeStudyError):
    """The requested operation is not valid in the session's current state."""


class CardStoreError(SwipeStudyError):
    """A batch could not be applied to the card store. Nothing was changed."""
