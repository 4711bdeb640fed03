"""UI task executor.

Runs an ordered sequence of asynchronous perception ("Insight") and
interaction ("Action") tasks, tracking per-task and run-level status, and
produces serializable dumps for reporting.
"""

__version__ = "0.1.0"

from ui_task_executor.config import ExecutorSettings
from ui_task_executor.executor.engine import Executor

__all__ = ["__version__", "Executor", "ExecutorSettings"]
