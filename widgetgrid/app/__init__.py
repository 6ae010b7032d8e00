"""Application-level services built on the grid core."""

from widgetgrid.app.bootstrap import Workspace, bootstrap_workspace
from widgetgrid.app.drag_session import DragOutcome, DragPhase, DragSession, DragState, active_drag

__all__ = [
    "DragOutcome",
    "DragPhase",
    "DragSession",
    "DragState",
    "Workspace",
    "active_drag",
    "bootstrap_workspace",
]
