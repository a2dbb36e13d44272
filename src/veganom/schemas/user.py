"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for common naming patterns (e.g., REFERENCE_START -> reference_start,
BAND -> band).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults. Unknown keys are ignored so that
config files can carry notes or legacy settings.
"""

from typing import Literal, Optional, Any
from pydantic import Field, field_validator
from veganom.schemas.base import VeganomBaseModel


class UserPeriodConfig(VeganomBaseModel):
    """User-facing date window (either bound may be omitted)."""
    start: Optional[str] = None
    end: Optional[str] = None

    @field_validator("start", "end", mode="before")
    @classmethod
    def coerce_to_text(cls, v):
        """Accept date/datetime objects as well as strings."""
        if v is not None:
            return str(v)
        return v


class UserGlobalConfig(VeganomBaseModel):
    """User-facing global config."""
    band: Optional[str] = None
    coord_names: Optional[dict[str, str]] = None


class UserBaselineConfig(VeganomBaseModel):
    """User-facing baseline config."""
    nodata_policy: Optional[str] = None

    @field_validator("nodata_policy", mode="before")
    @classmethod
    def normalize_policy(cls, v):
        """Normalize policy names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class UserSamplerConfig(VeganomBaseModel):
    """User-facing sampler config."""
    radius_m: Optional[float] = None
    require_valid_first: Optional[bool] = None


class UserOutputConfig(VeganomBaseModel):
    """User-facing output config."""
    netcdf_complevel: Optional[int] = None
    compression: Optional[str] = None


class UserConfig(VeganomBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    Usage
    -----
        user_cfg = UserConfig(
            INPUT_PATH="/data/modis_evi_hkh.nc",
            BOUNDARY_PATH="/data/hkh.geojson",
            REFERENCE_START="2001-01-01",
            REFERENCE_END="2005-12-31",
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Top-level operational settings
    input_path: Optional[str] = Field(None, alias="INPUT_PATH")
    boundary_path: Optional[str] = Field(None, alias="BOUNDARY_PATH")
    base_dir: Optional[str] = Field(None, alias="BASE_DIR")

    # Data settings (flat aliases)
    band: Optional[str] = Field(None, alias="BAND")

    # Period settings (flat aliases)
    reference_start: Optional[str] = Field(None, alias="REFERENCE_START")
    reference_end: Optional[str] = Field(None, alias="REFERENCE_END")
    target_start: Optional[str] = Field(None, alias="TARGET_START")
    target_end: Optional[str] = Field(None, alias="TARGET_END")

    # Processing settings (flat aliases)
    nodata_policy: Optional[str] = Field(None, alias="NODATA_POLICY")
    allow_empty_target: Optional[bool] = Field(None, alias="ALLOW_EMPTY_TARGET")
    sample_radius_m: Optional[float] = Field(None, alias="SAMPLE_RADIUS_M")
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(
        None, alias="LOG_LEVEL"
    )

    # Nested overrides (advanced users)
    global_: Optional[UserGlobalConfig] = Field(None, alias="global")
    reference: Optional[UserPeriodConfig] = None
    target: Optional[UserPeriodConfig] = None
    baseline: Optional[UserBaselineConfig] = None
    sampler: Optional[UserSamplerConfig] = None
    output: Optional[UserOutputConfig] = None

    model_config = VeganomBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("reference_start", "reference_end", "target_start", "target_end",
                     mode="before")
    @classmethod
    def coerce_dates_to_text(cls, v):
        """Accept date/datetime objects as well as strings."""
        if v is not None:
            return str(v)
        return v

    @field_validator("sample_radius_m", mode="before")
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for numeric fields."""
        if v is not None:
            return float(v)
        return v

    @field_validator("nodata_policy", mode="before")
    @classmethod
    def normalize_policy(cls, v):
        """Normalize policy names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides: dict[str, Any] = {}

        for key in ("input_path", "boundary_path", "base_dir"):
            value = getattr(self, key)
            if value is not None:
                overrides[key] = str(value)

        # Global section
        global_cfg = {}
        if self.band is not None:
            global_cfg["band"] = self.band
        if self.global_ is not None:
            global_cfg.update(self.global_.model_dump(exclude_none=True))
        if global_cfg:
            overrides["global"] = global_cfg

        # Period sections
        for name, start, end, nested in (
            ("reference", self.reference_start, self.reference_end, self.reference),
            ("target", self.target_start, self.target_end, self.target),
        ):
            period = {}
            if start is not None:
                period["start"] = start
            if end is not None:
                period["end"] = end
            if nested is not None:
                period.update(nested.model_dump(exclude_none=True))
            if period:
                overrides[name] = period

        # Baseline section
        baseline = {}
        if self.nodata_policy is not None:
            baseline["nodata_policy"] = self.nodata_policy
        if self.baseline is not None:
            baseline.update(self.baseline.model_dump(exclude_none=True))
        if baseline:
            overrides["baseline"] = baseline

        if self.allow_empty_target is not None:
            overrides["anomaly"] = {"allow_empty_target": self.allow_empty_target}

        # Sampler section
        sampler = {}
        if self.sample_radius_m is not None:
            sampler["radius_m"] = self.sample_radius_m
        if self.sampler is not None:
            sampler.update(self.sampler.model_dump(exclude_none=True))
        if sampler:
            overrides["sampler"] = sampler

        if self.output is not None:
            output = self.output.model_dump(exclude_none=True)
            if output:
                overrides["output"] = output

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
