"""ParamConfig: Expert defaults for the anomaly pipeline.

This module defines the complete default configuration. ALL pipeline
parameters must have defaults here. No runtime code should define fallback
values - this is the single source of truth for defaults.

Defaults reproduce the reference study: MODIS EVI composites, a 2001-2005
reference period and a 2006-2020 target period.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
import pandas as pd
from pydantic import Field, field_validator, model_validator
from veganom.schemas.base import VeganomBaseModel


# =============================================================================
# Nested Configuration Models
# =============================================================================

class CoordNamesConfig(VeganomBaseModel):
    """Coordinate names in the input raster stack."""
    time: str = "time"
    y: str = "lat"
    x: str = "lon"


class GlobalConfig(VeganomBaseModel):
    """Global pipeline settings."""
    band: str = Field("EVI", min_length=1, description="Vegetation index variable")
    coord_names: CoordNamesConfig = Field(default_factory=CoordNamesConfig)


class PeriodConfig(VeganomBaseModel):
    """Closed date window [start, end]."""
    start: str
    end: str

    @field_validator("start", "end", mode="before")
    @classmethod
    def check_parseable(cls, v):
        """Accept anything pandas can parse, store it as text."""
        if v is None:
            raise ValueError("Date is required")
        try:
            pd.Timestamp(v)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Unparseable date {v!r}: {e}") from e
        return str(v)

    @model_validator(mode="after")
    def check_order(self):
        if pd.Timestamp(self.start) > pd.Timestamp(self.end):
            raise ValueError(f"Period start {self.start} is after end {self.end}")
        return self


class ReferencePeriodConfig(PeriodConfig):
    """Baseline reference window."""
    start: str = "2001-01-01"
    end: str = "2005-12-31"


class TargetPeriodConfig(PeriodConfig):
    """Anomaly target window."""
    start: str = "2006-01-01"
    end: str = "2020-12-31"


class BaselineConfig(VeganomBaseModel):
    """Baseline construction."""
    nodata_policy: Literal["skip", "propagate"] = "skip"

    @field_validator("nodata_policy", mode="before")
    @classmethod
    def normalize_policy(cls, v):
        """Normalize policy names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class AnomalyConfig(VeganomBaseModel):
    """Anomaly/accumulation settings."""
    allow_empty_target: bool = Field(
        False, description="Treat an empty target window as 'no data' instead of failing"
    )


class SamplerConfig(VeganomBaseModel):
    """Point sampling for the chart consumer."""
    radius_m: float = Field(500.0, ge=0, description="Neighbourhood radius in metres")
    require_valid_first: bool = Field(
        True, description="Ignore clicks where the first input image has no valid data"
    )

    @field_validator("radius_m", mode="before")
    @classmethod
    def coerce_radius_to_float(cls, v):
        """Allow int or float for radius."""
        return float(v)


class OutputConfig(VeganomBaseModel):
    """Output file configuration."""
    netcdf_complevel: int = Field(4, ge=0, le=9)
    compression: Literal["snappy", "gzip", "lz4", "none"] = "snappy"


class LoggingConfig(VeganomBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(VeganomBaseModel):
    """Complete expert configuration with all defaults.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    input_path: Optional[str] = None
    boundary_path: Optional[str] = None
    base_dir: Optional[str] = None
    global_: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    reference: ReferencePeriodConfig = Field(default_factory=ReferencePeriodConfig)
    target: TargetPeriodConfig = Field(default_factory=TargetPeriodConfig)
    baseline: BaselineConfig = Field(default_factory=BaselineConfig)
    anomaly: AnomalyConfig = Field(default_factory=AnomalyConfig)
    sampler: SamplerConfig = Field(default_factory=SamplerConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = VeganomBaseModel.model_config.copy()
    model_config.update({"populate_by_name": True})  # Allow both 'global' and 'global_'
