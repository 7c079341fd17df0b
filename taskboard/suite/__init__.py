from .suite import Suite
from .types import DashboardError, SuiteError

__all__ = ["Suite", "DashboardError", "SuiteError"]
