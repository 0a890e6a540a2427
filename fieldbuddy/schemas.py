from __future__ import annotations
from typing import Optional, List, Annotated, Union
from pydantic import BaseModel, Field, ConfigDict, field_validator

from . import calibration as CAL

# Common helpers
Positive = Annotated[float, Field(gt=0)]
NonNegative = Annotated[float, Field(ge=0)]
PositiveInt = Annotated[int, Field(ge=1)]
Ratio = Annotated[float, Field(ge=0)]


# Duct design
class PlanInputs(BaseModel):
    model_config = ConfigDict(extra="forbid")
    total_cfm: Positive
    split: Union[PositiveInt, List[Ratio]] = list(CAL.PLAN_SPLIT)
    trunk_fpm: Positive = CAL.TRUNK_FPM
    branch_fpm: Positive = CAL.BRANCH_FPM

    @field_validator("split")
    @classmethod
    def _split_not_empty(cls, v):
        if isinstance(v, list) and (not v or sum(v) <= 0):
            raise ValueError("split ratios must contain a positive value")
        return v


class RoundDuctInputs(BaseModel):
    model_config = ConfigDict(extra="forbid")
    cfm: Positive
    target_fpm: Positive = CAL.TRUNK_FPM
    min_dia: Positive = CAL.DUCT_MIN_DIA
    max_dia: Positive = CAL.DUCT_MAX_DIA
    even: bool = True


class RectDuctInputs(BaseModel):
    model_config = ConfigDict(extra="forbid")
    cfm: Positive
    target_fpm: Positive = CAL.TRUNK_FPM
    aspect: Positive = CAL.RECT_ASPECT
    min_w: Positive = CAL.RECT_MIN_W
    min_h: Positive = CAL.RECT_MIN_H


class ReturnInputs(BaseModel):
    model_config = ConfigDict(extra="forbid")
    cfm: Positive
    max_face_vel: Positive = CAL.FACE_FPM


class FrictionInputs(BaseModel):
    model_config = ConfigDict(extra="forbid")
    total_esp: float = CAL.ESP_DEFAULT
    eql_ft: Positive = CAL.EQL_DEFAULT
    drops: NonNegative = CAL.DROPS_DEFAULT
    # supply/return split, used by the diagnostics friction rate when given
    supply_drop: Optional[NonNegative] = None
    return_drop: Optional[NonNegative] = None


class SegmentIn(BaseModel):
    model_config = ConfigDict(extra="forbid")
    length_ft: NonNegative = 0.0
    type: Optional[str] = None


# Refrigerant diagnostics
class PTInputs(BaseModel):
    model_config = ConfigDict(extra="forbid")
    psig: float
    refrigerant: str = CAL.DEFAULT_REFRIGERANT


class SystemReadings(BaseModel):
    """Raw gauge/thermometer readings; any subset may be present."""
    model_config = ConfigDict(extra="forbid")
    refrigerant: str = CAL.DEFAULT_REFRIGERANT
    metering_device: str = CAL.DEFAULT_METERING
    return_f: Optional[float] = None
    supply_f: Optional[float] = None
    suction_psig: Optional[float] = None
    suction_line_f: Optional[float] = None
    liquid_psig: Optional[float] = None
    liquid_line_f: Optional[float] = None
    tons: Optional[Positive] = None
    sqft: Optional[Positive] = None


class ChargeInputs(BaseModel):
    model_config = ConfigDict(extra="forbid")
    metering_device: str = CAL.DEFAULT_METERING
    superheat: Optional[float] = None
    subcool: Optional[float] = None
    target_subcool: float = CAL.CHARGE_SUBCOOL_TARGET
    target_sh: float = CAL.CHARGE_SH_TARGET


# Service reports
class Customer(BaseModel):
    model_config = ConfigDict(extra="ignore")
    name: str
    addr: str


class DiagnosticEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")
    label: str
    value: Union[float, int, str, None] = None
    unit: Optional[str] = None


class MaterialLine(BaseModel):
    model_config = ConfigDict(extra="ignore")
    category: str
    name: str
    qty: PositiveInt


class ServiceReport(BaseModel):
    model_config = ConfigDict(extra="ignore")
    id: str
    date: str
    tech: str = ""
    customer: Customer
    complaint: str = ""
    diagnostics: List[DiagnosticEntry] = Field(default_factory=list)
    materials: List[MaterialLine] = Field(default_factory=list)
    notes: str = ""
