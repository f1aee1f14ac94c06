from pydantic import BaseModel


class SimulationSummary(BaseModel):
    installed_dc_kw: float
    inverter_ac_kw: float
    dc_ac_ratio: float
    battery_capacity_kwh: float
    total_production_kwh: float
    total_load_kwh: float
    total_import_kwh: float
    total_export_kwh: float
    shading_loss_kwh: float
    clipping_loss_kwh: float
    self_consumption_ratio: float
    autonomy_ratio: float
    specific_yield_kwh_kwp: float
    monthly_production_kwh: list[float]
    monthly_load_kwh: list[float]
    monthly_import_kwh: list[float]
    monthly_export_kwh: list[float]


class AdvisoryResponse(BaseModel):
    id: str
    type: str
    title: str
    message: str


class SimulationResponse(BaseModel):
    summary: SimulationSummary
    advisories: list[AdvisoryResponse]
    hourly: dict[str, list[float]] | None = None


class ScenarioResponse(BaseModel):
    key: str
    label: str
    description: str
    panel_id: str
    inverter_id: str
    battery_id: str | None
    panels: int
    inverter: str
    inverter_count: int
    batteries: int
    power_kw: float
    total_production_kwh: float
    total_import_kwh: float
    total_export_kwh: float
    self_consumption_ratio: float
    autonomy_ratio: float
