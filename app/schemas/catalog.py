from pydantic import BaseModel


class PanelResponse(BaseModel):
    id: str
    manufacturer: str
    model: str
    power_w: float
    width_mm: float
    height_mm: float
    efficiency: float
    voc: float
    isc: float
    vmp: float
    imp: float
    temp_coeff_voc: float
    price: float


class InverterResponse(BaseModel):
    id: str
    manufacturer: str
    model: str
    max_power_kw: float
    phases: int
    max_dc_voltage: float
    start_voltage: float
    mppt_range: list[float]
    max_input_current: float
    num_mppts: int
    efficiency: float
    price: float


class BatteryResponse(BaseModel):
    id: str
    manufacturer: str
    model: str
    capacity_kwh: float
    max_discharge_kw: float
    max_charge_kw: float
    efficiency: float
    price: float


class CatalogResponse(BaseModel):
    panels: list[PanelResponse]
    inverters: list[InverterResponse]
    batteries: list[BatteryResponse]
