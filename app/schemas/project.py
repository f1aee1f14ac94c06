from typing import Literal

import numpy as np
from pydantic import BaseModel, Field

from pvengine.project import LoadProfile, Project, RoofSegment, SystemConfig
from pvengine.weather.climate import ClimateRecord


class RoofSegmentIn(BaseModel):
    name: str = ""
    tilt: float = Field(default=30.0, ge=0, le=90)
    azimuth: float = Field(default=0.0, ge=-180, le=180)
    panels_count: int = Field(default=0, ge=0)
    edge_margin: float = Field(default=0.5, ge=0)
    row_spacing: float = Field(default=0.05, ge=0)
    column_spacing: float = Field(default=0.02, ge=0)
    width: float = Field(default=0.0, ge=0)
    height: float = Field(default=0.0, ge=0)

    def to_domain(self) -> RoofSegment:
        return RoofSegment(**self.model_dump())


class SystemConfigIn(BaseModel):
    panel_id: str
    inverter_id: str
    inverter_count: int = Field(default=1, ge=0)
    battery_id: str | None = None
    battery_count: int = Field(default=0, ge=0)
    cable_dc_meters: float = Field(default=20.0, ge=0)
    cable_ac_meters: float = Field(default=10.0, ge=0)

    def to_domain(self) -> SystemConfig:
        return SystemConfig(**self.model_dump())


class LoadProfileIn(BaseModel):
    kind: Literal["simplified", "imported"] = "simplified"
    annual_kwh: float | None = Field(default=3500.0, ge=0)
    base_kw: float = Field(default=0.2, ge=0)
    peak_kw: float = Field(default=2.5, ge=0)
    behavior: str = "default"
    hourly_kw: list[float] | None = None

    def to_domain(self) -> LoadProfile:
        hourly = None
        if self.hourly_kw is not None:
            hourly = np.asarray(self.hourly_kw, dtype=np.float64)
        return LoadProfile(
            annual_kwh=self.annual_kwh,
            base_kw=self.base_kw,
            peak_kw=self.peak_kw,
            behavior=self.behavior,
            kind=self.kind,
            hourly_kw=hourly,
        )


class ClimateIn(BaseModel):
    """Hourly climate series; each list must hold 8760 values."""

    temperature: list[float]
    irradiance: list[float]
    humidity: list[float]
    source: str = "upload"


class ProjectIn(BaseModel):
    name: str = ""
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(default=0.0, ge=-180, le=180)
    roof_segments: list[RoofSegmentIn] = Field(default_factory=list)
    system_config: SystemConfigIn
    load_profile: LoadProfileIn = Field(default_factory=LoadProfileIn)
    climate: ClimateIn | None = None
    seed: int | None = Field(default=None, description="Seed for synthetic climate and load")

    def to_domain(self) -> Project:
        climate = None
        if self.climate is not None:
            climate = ClimateRecord(
                temperature=self.climate.temperature,
                irradiance=self.climate.irradiance,
                humidity=self.climate.humidity,
                latitude=self.latitude,
                source=self.climate.source,
            )
            climate.validate()
        return Project(
            name=self.name,
            latitude=self.latitude,
            longitude=self.longitude,
            roof_segments=tuple(seg.to_domain() for seg in self.roof_segments),
            system_config=self.system_config.to_domain(),
            load_profile=self.load_profile.to_domain(),
            climate=climate,
        )
