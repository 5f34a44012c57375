"""
Enumerations for pipeline toolkit data models.

All enums are closed taxonomies - no values outside these sets are permitted.
"""

from enum import Enum


class ChangeState(str, Enum):
    """Lifecycle state of a reviewable change as reported by the remote."""

    OPEN = "open"
    CLOSED = "closed"


class Stage(str, Enum):
    """
    Phase of a two-step remote operation.

    OBSERVE reads the current remote state; ACT performs the state-changing
    call. The same status code means different things in each stage.
    """

    OBSERVE = "observe"
    ACT = "act"
