"""
Service layer: monorepo preparation, integration, sync and the full pipeline.
"""
from .catalog import RepositoryCatalog
from .integrator import (
    IntegrationMode,
    IntegrationOutcome,
    IntegrationReport,
    Integrator,
    OutcomeStatus,
)
from .monorepo import MonorepoInitializer
from .pipeline import MonorepoPipeline, PipelineCallbacks, RunReport
from .sync import SyncEngine, SyncReport

__all__ = [
    "IntegrationMode",
    "IntegrationOutcome",
    "IntegrationReport",
    "Integrator",
    "MonorepoInitializer",
    "MonorepoPipeline",
    "OutcomeStatus",
    "PipelineCallbacks",
    "RepositoryCatalog",
    "RunReport",
    "SyncEngine",
    "SyncReport",
]
