"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that processing code depends on.

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from typing import Literal, Optional
import pandas as pd
from pydantic import Field, ConfigDict, model_validator
from veganom.schemas.base import VeganomBaseModel


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalCoordNamesConfig(VeganomBaseModel):
    """Runtime coordinate name mappings."""
    time: str
    y: str
    x: str


class InternalGlobalConfig(VeganomBaseModel):
    """Runtime global settings."""
    band: str
    coord_names: InternalCoordNamesConfig


class InternalPeriodConfig(VeganomBaseModel):
    """Runtime closed date window."""
    start: str
    end: str

    @model_validator(mode="after")
    def check_order(self):
        if pd.Timestamp(self.start) > pd.Timestamp(self.end):
            raise ValueError(f"Period start {self.start} is after end {self.end}")
        return self


class InternalBaselineConfig(VeganomBaseModel):
    """Runtime baseline configuration."""
    nodata_policy: Literal["skip", "propagate"]


class InternalAnomalyConfig(VeganomBaseModel):
    """Runtime anomaly configuration."""
    allow_empty_target: bool


class InternalSamplerConfig(VeganomBaseModel):
    """Runtime point-sampler configuration."""
    radius_m: float = Field(ge=0)
    require_valid_first: bool


class InternalOutputConfig(VeganomBaseModel):
    """Runtime output configuration."""
    netcdf_complevel: int = Field(ge=0, le=9)
    compression: Literal["snappy", "gzip", "lz4", "none"]


class InternalLoggingConfig(VeganomBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(VeganomBaseModel):
    """Authoritative runtime configuration.

    This is the ONLY configuration schema that processing code sees.
    It is fully validated, immutable, and contains explicit values for
    all parameters (no None for fields that runtime depends on).

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.band = config.global_.band  # NOT .get()
            self.radius_m = config.sampler.radius_m

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO type checking
    - NO validation

    All of that happens during config resolution, not in runtime code.
    input_path, boundary_path and base_dir stay optional because library
    callers may hand the processor an in-memory provider and boundary.
    """

    input_path: Optional[str]
    boundary_path: Optional[str]
    base_dir: Optional[str]
    global_: InternalGlobalConfig = Field(alias="global")
    reference: InternalPeriodConfig
    target: InternalPeriodConfig
    baseline: InternalBaselineConfig
    anomaly: InternalAnomalyConfig
    sampler: InternalSamplerConfig
    output: InternalOutputConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
        populate_by_name=True,  # Allow both 'global' and 'global_'
    )
