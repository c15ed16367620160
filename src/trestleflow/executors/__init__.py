# Re-export executors for easy access
from .base import BaseExecutor, ExecutionContext, SKIP
from .trestle_exec import TrestleExecutor
