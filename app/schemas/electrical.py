from pydantic import BaseModel, Field


class StringConfigResponse(BaseModel):
    inverter_index: int
    mppt_id: int
    num_strings: int
    panels_per_string: int
    voc_string: float
    vmp_string: float
    isc_string: float
    imp_string: float
    power_kw: float


class VerificationMetrics(BaseModel):
    total_dc_kw: float
    total_ac_kw: float
    dc_ac_ratio: float
    max_string_voltage: float
    max_string_current: float
    unassigned_panels: int


class CableSizing(BaseModel):
    dc_string_mm2: float
    ac_mm2: float
    dc_voltage_drop_pct: float
    ac_voltage_drop_pct: float


class ProtectionSizing(BaseModel):
    dc_fuse_a: int
    ac_breaker_a: int


class VerificationResponse(BaseModel):
    valid: bool
    errors: list[str]
    warnings: list[str]
    strings: list[StringConfigResponse]
    metrics: VerificationMetrics
    cables: CableSizing
    protection: ProtectionSizing


class FixSuggestionResponse(BaseModel):
    panel_id: str
    inverter_id: str
    inverter_count: int
    battery_id: str | None
    battery_count: int
    reason: str


class RowSpacingRequest(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    tilt: float = Field(default=30.0, ge=0, le=90)
    azimuth: float = Field(default=0.0, ge=-180, le=180)
    panel_height_m: float | None = Field(default=None, gt=0)
    panel_id: str | None = None


class RowSpacingResponse(BaseModel):
    row_spacing_m: float
    panel_height_m: float
    design_day: int
    design_hour: float
