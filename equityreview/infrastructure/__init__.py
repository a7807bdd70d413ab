"""Infrastructure layer exports."""

from .audit import AuditLog
from .history import HistorySink, HttpHistorySink, NullHistorySink
from .jobs import InMemoryJobRepository, JobRepository
from .providers import AnalysisProvider, FutureExternalProvider, MockRuleEngine, create_analysis_provider

__all__ = [
    "AnalysisProvider",
    "AuditLog",
    "FutureExternalProvider",
    "HistorySink",
    "HttpHistorySink",
    "InMemoryJobRepository",
    "JobRepository",
    "MockRuleEngine",
    "NullHistorySink",
    "create_analysis_provider",
]
