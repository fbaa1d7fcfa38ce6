"""
Calculation requests and their translation into WebBook URLs.

Five kinds of property sweep are supported:

===========================  ========  =====================================
Request                      Tag       Query parameters
===========================  ========  =====================================
IsobarRequest                isobar    Type=IsoBar, P, TLow, THigh, TInc
IsothermRequest              isotherm  Type=IsoTherm, T, PLow, PHigh, PInc
IsochoreRequest              isochor   Type=IsoChor, D, TLow, THigh, TInc
SaturationByPressureRequest  satT      Type=SatT, PLow, PHigh, PInc
SaturationByTemperatureReq.  satP      Type=SatP, TLow, THigh, TInc
===========================  ========  =====================================

Every query also carries the substance ID, the reference state, the seven
unit tokens and the number of digits.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar, Dict, List, Tuple, Type

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from fluidfetch.units import UnitLabels, UnitSelection

DEFAULT_DATA_URL = "https://webbook.nist.gov/cgi/fluid.cgi"


def _number(value: float) -> str:
    """Plain decimal notation; exponent forms carry a '+' that breaks queries."""
    text = repr(float(value))
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    return text


def _query_token(name: str, value: str) -> str:
    value = value.strip()
    if not value or any(ch.isspace() for ch in value) or "&" in value or "=" in value:
        raise ValueError(f"{name} must be a single token without '&' or '='")
    return value


class CalculationRequest(BaseModel):
    """Shared fields of every sweep. Instances are immutable."""

    TYPE: ClassVar[str] = ""
    TAG: ClassVar[str] = ""
    TITLE: ClassVar[str] = ""

    substance_id: str = Field(..., description="WebBook substance ID, e.g. C7732185")
    ref_state: str = Field(default="DEF", min_length=1, description="Standard state convention")
    digits: int = Field(default=5, ge=1, description="Number of digits in the table")
    units: UnitSelection = Field(default_factory=UnitSelection.default)

    model_config = {"frozen": True, "extra": "forbid"}

    @field_validator("substance_id", "ref_state")
    @classmethod
    def validate_query_token(cls, v: str, info: ValidationInfo) -> str:
        """ID and reference state go into the query string verbatim."""
        return _query_token(info.field_name, v)

    def sweep_parameters(self) -> List[Tuple[str, str]]:
        """Variant-specific query parameters, Type first."""
        raise NotImplementedError

    def summary(self, labels: UnitLabels) -> List[Tuple[str, str]]:
        """(label, value) rows echoed to the user before the request."""
        raise NotImplementedError


class _TemperatureSweep(CalculationRequest):
    t_low: float = Field(..., description="Lowest temperature")
    t_high: float = Field(..., description="Highest temperature")
    t_inc: float = Field(default=1.0, gt=0, description="Temperature increment")

    @model_validator(mode="after")
    def check_range(self):
        if self.t_high < self.t_low:
            raise ValueError(f"t_high ({self.t_high}) is below t_low ({self.t_low})")
        return self

    def _range_parameters(self) -> List[Tuple[str, str]]:
        return [
            ("TLow", _number(self.t_low)),
            ("THigh", _number(self.t_high)),
            ("TInc", _number(self.t_inc)),
        ]

    def _range_summary(self, labels: UnitLabels) -> List[Tuple[str, str]]:
        return [
            (f"T(low)/{labels.temperature}", _number(self.t_low)),
            (f"T(high)/{labels.temperature}", _number(self.t_high)),
            (f"T(inc)/{labels.temperature}", _number(self.t_inc)),
        ]


class _PressureSweep(CalculationRequest):
    p_low: float = Field(..., description="Lowest pressure")
    p_high: float = Field(..., description="Highest pressure")
    p_inc: float = Field(default=1.0, gt=0, description="Pressure increment")

    @model_validator(mode="after")
    def check_range(self):
        if self.p_high < self.p_low:
            raise ValueError(f"p_high ({self.p_high}) is below p_low ({self.p_low})")
        return self

    def _range_parameters(self) -> List[Tuple[str, str]]:
        return [
            ("PLow", _number(self.p_low)),
            ("PHigh", _number(self.p_high)),
            ("PInc", _number(self.p_inc)),
        ]

    def _range_summary(self, labels: UnitLabels) -> List[Tuple[str, str]]:
        return [
            (f"P(low)/{labels.pressure}", _number(self.p_low)),
            (f"P(high)/{labels.pressure}", _number(self.p_high)),
            (f"P(inc)/{labels.pressure}", _number(self.p_inc)),
        ]


class IsobarRequest(_TemperatureSweep):
    TYPE: ClassVar[str] = "IsoBar"
    TAG: ClassVar[str] = "isobar"
    TITLE: ClassVar[str] = "isobaric properties"

    pressure: float = Field(..., description="Constant pressure")

    def sweep_parameters(self) -> List[Tuple[str, str]]:
        return [("Type", self.TYPE), ("P", _number(self.pressure))] + self._range_parameters()

    def summary(self, labels: UnitLabels) -> List[Tuple[str, str]]:
        return [(f"P/{labels.pressure}", _number(self.pressure))] + self._range_summary(labels)


class IsothermRequest(_PressureSweep):
    TYPE: ClassVar[str] = "IsoTherm"
    TAG: ClassVar[str] = "isotherm"
    TITLE: ClassVar[str] = "isothermal properties"

    temperature: float = Field(..., description="Constant temperature")

    def sweep_parameters(self) -> List[Tuple[str, str]]:
        return [("Type", self.TYPE), ("T", _number(self.temperature))] + self._range_parameters()

    def summary(self, labels: UnitLabels) -> List[Tuple[str, str]]:
        return [(f"T/{labels.temperature}", _number(self.temperature))] + self._range_summary(labels)


class IsochoreRequest(_TemperatureSweep):
    TYPE: ClassVar[str] = "IsoChor"
    TAG: ClassVar[str] = "isochor"
    TITLE: ClassVar[str] = "isochoric properties"

    density: float = Field(..., gt=0, description="Constant density")

    def sweep_parameters(self) -> List[Tuple[str, str]]:
        return [("Type", self.TYPE), ("D", _number(self.density))] + self._range_parameters()

    def summary(self, labels: UnitLabels) -> List[Tuple[str, str]]:
        return [(f"Dens/({labels.density})", _number(self.density))] + self._range_summary(labels)


class SaturationByPressureRequest(_PressureSweep):
    """Saturation properties at pressure increments (service type SatT)."""

    TYPE: ClassVar[str] = "SatT"
    TAG: ClassVar[str] = "satT"
    TITLE: ClassVar[str] = "saturation properties"

    def sweep_parameters(self) -> List[Tuple[str, str]]:
        return [("Type", self.TYPE)] + self._range_parameters()

    def summary(self, labels: UnitLabels) -> List[Tuple[str, str]]:
        return self._range_summary(labels)


class SaturationByTemperatureRequest(_TemperatureSweep):
    """Saturation properties at temperature increments (service type SatP)."""

    TYPE: ClassVar[str] = "SatP"
    TAG: ClassVar[str] = "satP"
    TITLE: ClassVar[str] = "saturation properties"

    def sweep_parameters(self) -> List[Tuple[str, str]]:
        return [("Type", self.TYPE)] + self._range_parameters()

    def summary(self, labels: UnitLabels) -> List[Tuple[str, str]]:
        return self._range_summary(labels)


REQUEST_TYPES: Dict[str, Type[CalculationRequest]] = {
    cls.TAG: cls
    for cls in (
        IsobarRequest,
        IsothermRequest,
        IsochoreRequest,
        SaturationByPressureRequest,
        SaturationByTemperatureRequest,
    )
}


@dataclass(frozen=True)
class RequestPlan:
    """URLs and default file name for one calculation."""

    prime_url: str
    data_url: str
    query: str
    output_stem: str

    @property
    def output_name(self) -> str:
        return f"{self.output_stem}.dat"


def build_query(request: CalculationRequest, units: UnitLabels) -> str:
    """Query string shared by the prime and the data URL."""
    parts = [
        f"ID={request.substance_id}",
        f"RefState={request.ref_state}",
        units.query_string(),
        "&".join(f"{key}={value}" for key, value in request.sweep_parameters()),
        f"Digits={request.digits}",
    ]
    return "&".join(parts)


def build(
    request: CalculationRequest,
    units: UnitLabels,
    base_url: str = DEFAULT_DATA_URL,
    prefix: str = "fluids",
) -> RequestPlan:
    """Translate a request into the prime URL, the data URL and a file stem.

    Both URLs carry the same query; the prime URL must be fetched first.
    """
    query = build_query(request, units)
    return RequestPlan(
        prime_url=f"{base_url}?Action=Load&{query}",
        data_url=f"{base_url}?Action=Data&Wide=on&{query}",
        query=query,
        output_stem=f"{prefix}_{request.TAG}",
    )
