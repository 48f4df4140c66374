# Session Engine Package
from .base import SessionState, SessionSummary
from .learn import LearnSession, SessionItem, run_learn_session
from .swipe import SwipeSession

__all__ = [
    "SessionState",
    "SessionSummary",
    "SwipeSession",
    "LearnSession",
    "SessionItem",
    "run_learn_session",
]
