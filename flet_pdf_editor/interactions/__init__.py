"""
User interaction handlers - tools and pointer gestures.
"""

from .gestures import DrawGesture, MoveGesture, ResizeGesture
from .tools import ToolStateMachine

__all__ = ["ToolStateMachine", "MoveGesture", "ResizeGesture", "DrawGesture"]
