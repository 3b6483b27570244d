"""Transient session state and boundary handling."""

from .boundary import SessionBoundaryController, Transition, TransitionKind, classify
from .state import GlobalState, Message, PodcastData, ReportData

__all__ = [
    "GlobalState",
    "Message",
    "PodcastData",
    "ReportData",
    "SessionBoundaryController",
    "Transition",
    "TransitionKind",
    "classify",
]
