"""Command-line interface modules for veganom pipeline execution.

This package contains core execution logic, making scripts/ optional and deletable.
"""

from veganom.cli.run_anomaly import run_anomaly_pipeline

__all__ = ['run_anomaly_pipeline']
