"""Qt-aware controllers used by the QuickC main window."""

from .action_registry import ActionRegistry
from .execution_controller import ExecutionController

__all__ = [
    "ActionRegistry",
    "ExecutionController",
]
