"""Qt-aware controllers used by editor hosts."""

from .execution_controller import ExecutionController
from .language_service_hub import LanguageServiceHub

__all__ = [
    "ExecutionController",
    "LanguageServiceHub",
]
