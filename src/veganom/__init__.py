"""`veganom` - cumulative vegetation-index anomalies over a region.

Subpackages:
- raster: Image/series model, boundary clipping, data providers
- anomaly: Baseline, anomaly, cumulative and point-sampling stages
- contracts: Stage contracts and failure types
- schemas: Layered pydantic configuration
- pipeline: Processor, sampling worker, orchestrator
- cli: Pipeline runner
"""

__version__ = "0.1.0"
