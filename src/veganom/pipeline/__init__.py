"""Pipeline modules.

- context: Immutable run result and chart-facing queries
- processor: Staged anomaly computation
- sampling: Background point-sampling worker
- orchestrator: Logging setup and output persistence
"""

from veganom.pipeline.context import AnomalyContext
from veganom.pipeline.processor import AnomalyProcessor
from veganom.pipeline.sampling import SamplingWorker
from veganom.pipeline.orchestrator import PipelineOrchestrator

__all__ = [
    "AnomalyContext",
    "AnomalyProcessor",
    "SamplingWorker",
    "PipelineOrchestrator",
]
