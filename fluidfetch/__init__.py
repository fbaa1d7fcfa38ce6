"""
fluidfetch: fluid properties from the NIST Chemistry WebBook
=============================================================

Command-line client that requests isobaric, isothermal, isochoric and
saturation property tables from the WebBook fluid service and writes them
to annotated plain-text files.
"""

from ._version import __version__

__author__ = "fluidfetch contributors"
__license__ = "MIT"

from fluidfetch.units import UnitSelection, UnitLabels, resolve
from fluidfetch.calculations import (
    CalculationRequest,
    IsobarRequest,
    IsothermRequest,
    IsochoreRequest,
    SaturationByPressureRequest,
    SaturationByTemperatureRequest,
    RequestPlan,
    build,
)
from fluidfetch.catalogue import CatalogueCache, CatalogueEntry
from fluidfetch.tables import classify, render_output

__all__ = [
    "__version__",
    "UnitSelection",
    "UnitLabels",
    "resolve",
    "CalculationRequest",
    "IsobarRequest",
    "IsothermRequest",
    "IsochoreRequest",
    "SaturationByPressureRequest",
    "SaturationByTemperatureRequest",
    "RequestPlan",
    "build",
    "CatalogueCache",
    "CatalogueEntry",
    "classify",
    "render_output",
]
