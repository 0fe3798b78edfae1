"""Re-export individual schema modules for easy imports."""

from .user import UserOut
from .report import ReportOut, SubjectErrorOut

__all__ = [
    "UserOut",
    "ReportOut",
    "SubjectErrorOut",
]
