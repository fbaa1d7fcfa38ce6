"""
Unit handling for WebBook requests.

The fluid service takes one unit per physical quantity, chosen here by a
small 1-based integer code per quantity, always given in this order:

    temperature pressure density energy velocity viscosity surface-tension

e.g. ``"1 2 3 1 1 2 1"`` selects K, bar, g/ml, kJ/mol, m/s, Pa*s and N/m.
"""

from dataclasses import dataclass, fields
from typing import Dict, Optional, Sequence, Tuple

from fluidfetch.exceptions import InvalidUnitCode, UsageError


# Label lists, indexed by code - 1
TEMPERATURE_UNITS = ("K", "C", "F", "R")
PRESSURE_UNITS = ("MPa", "bar", "atm", "torr", "psia")
DENSITY_UNITS = ("mol/l", "mol/m3", "g/ml", "kg/m3", "lb-mole/ft3", "lbm/ft3")
ENERGY_UNITS = ("kJ/mol", "kJ/kg", "kcal/mol", "Btu/lb-mole", "kcal/g", "Btu/lbm")
VELOCITY_UNITS = ("m/s", "ft/s", "mph")
VISCOSITY_UNITS = ("uPa*s", "Pa*s", "cP", "lbm/ft*s")
SURFACE_TENSION_UNITS = ("N/m", "dyn/cm", "lb/ft", "lb/in")

# Derived labels, parallel to DENSITY_UNITS and ENERGY_UNITS
VOLUME_UNITS = ("l/mol", "m3/mol", "ml/g", "m3/kg", "ft3/lb-mole", "ft3/lbm")
ENTROPY_UNITS = ("J/mol*K", "J/g*K", "cal/mol*K", "Btu/lb-mole*R", "cal/g*K", "Btu/lbm*R")

UNIT_TABLES: Dict[str, Tuple[str, ...]] = {
    "temperature": TEMPERATURE_UNITS,
    "pressure": PRESSURE_UNITS,
    "density": DENSITY_UNITS,
    "energy": ENERGY_UNITS,
    "velocity": VELOCITY_UNITS,
    "viscosity": VISCOSITY_UNITS,
    "surface_tension": SURFACE_TENSION_UNITS,
}

# Query parameter carrying each quantity's unit
URL_PARAMETERS: Dict[str, str] = {
    "temperature": "TUnit",
    "pressure": "PUnit",
    "density": "DUnit",
    "energy": "HUnit",
    "velocity": "WUnit",
    "viscosity": "VisUnit",
    "surface_tension": "STUnit",
}

DEFAULT_CODES = (1, 2, 3, 1, 1, 2, 1)
SI_CODES = (1, 1, 4, 1, 1, 2, 1)


def url_token(label: str) -> str:
    """Return the label in the form the service expects in a query string."""
    return label.replace("/", "%2F")


@dataclass(frozen=True)
class UnitSelection:
    """Unit code per quantity; every code is validated on construction."""

    temperature: int = DEFAULT_CODES[0]
    pressure: int = DEFAULT_CODES[1]
    density: int = DEFAULT_CODES[2]
    energy: int = DEFAULT_CODES[3]
    velocity: int = DEFAULT_CODES[4]
    viscosity: int = DEFAULT_CODES[5]
    surface_tension: int = DEFAULT_CODES[6]

    def __post_init__(self):
        for f in fields(self):
            code = getattr(self, f.name)
            valid = range(1, len(UNIT_TABLES[f.name]) + 1)
            if isinstance(code, bool) or not isinstance(code, int) or code not in valid:
                raise InvalidUnitCode(quantity=f.name, code=code, valid=valid)

    @classmethod
    def from_codes(cls, codes: Sequence[int]) -> "UnitSelection":
        if len(codes) != len(UNIT_TABLES):
            raise UsageError(
                f"Expected {len(UNIT_TABLES)} unit codes, got {len(codes)}",
                context={"codes": list(codes)},
            )
        return cls(*codes)

    @classmethod
    def default(cls) -> "UnitSelection":
        return cls.from_codes(DEFAULT_CODES)

    @classmethod
    def si(cls) -> "UnitSelection":
        return cls.from_codes(SI_CODES)

    def codes(self) -> Tuple[int, ...]:
        return tuple(getattr(self, f.name) for f in fields(self))

    def __str__(self) -> str:
        return " ".join(str(code) for code in self.codes())


@dataclass(frozen=True)
class UnitLabels:
    """Resolved unit labels for one UnitSelection."""

    temperature: str
    pressure: str
    density: str
    energy: str
    velocity: str
    viscosity: str
    surface_tension: str
    volume: str
    entropy: str

    def url_tokens(self) -> Dict[str, str]:
        """Query parameters for the seven transmitted quantities, in order."""
        return {
            param: url_token(getattr(self, quantity))
            for quantity, param in URL_PARAMETERS.items()
        }

    def query_string(self) -> str:
        return "&".join(f"{param}={token}" for param, token in self.url_tokens().items())

    def as_dict(self) -> Dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def resolve(selection: UnitSelection) -> UnitLabels:
    """Look up the labels for every quantity of a selection.

    The volume label follows the density code and the entropy label
    follows the energy code.
    """
    labels = {
        quantity: table[getattr(selection, quantity) - 1]
        for quantity, table in UNIT_TABLES.items()
    }
    labels["volume"] = VOLUME_UNITS[selection.density - 1]
    labels["entropy"] = ENTROPY_UNITS[selection.energy - 1]
    return UnitLabels(**labels)


def parse_unit_override(value: str) -> UnitSelection:
    """Parse a ``-u``-style override such as ``"1 1 4 2 1 2 1"``.

    Raises:
        UsageError: if the value does not hold exactly seven integers
        InvalidUnitCode: if an integer is out of range for its quantity
    """
    tokens = value.split()
    if len(tokens) != len(UNIT_TABLES):
        raise UsageError(
            f"Number of unit codes mismatch: expected {len(UNIT_TABLES)}, "
            f"got {len(tokens)} in {value!r}",
            context={"value": value},
        )
    try:
        codes = [int(token) for token in tokens]
    except ValueError as e:
        raise UsageError(f"Unit codes must be integers: {value!r}", context={"value": value}) from e
    return UnitSelection.from_codes(codes)


def select_units(
    si: bool = False,
    override: Optional[str] = None,
    default: Optional[UnitSelection] = None,
) -> Tuple[UnitSelection, str]:
    """Pick the active selection and name it for display.

    An explicit override wins over the SI preset, which wins over the
    configured default.

    Returns:
        (selection, "Actual" | "SI" | "Default")
    """
    if override:
        return parse_unit_override(override), "Actual"
    if si:
        return UnitSelection.si(), "SI"
    return default or UnitSelection.default(), "Default"


_QUANTITY_TITLES = {
    "temperature": ("%t", "Temperature"),
    "pressure": ("%p", "Pressure"),
    "density": ("%d", "Density"),
    "energy": ("%e", "Energy"),
    "velocity": ("%v", "Velocity"),
    "viscosity": ("%m", "Viscosity"),
    "surface_tension": ("%g", "Surface tension"),
}


def describe_units(selection: UnitSelection, heading: str = "Default") -> str:
    """Render the unit help screen for the ``units`` command."""
    lines = [" Option Usage: --units '%t %p %d %e %v %m %g'"]
    for quantity, (placeholder, title) in _QUANTITY_TITLES.items():
        choices = ", ".join(
            f"{code}={label}" for code, label in enumerate(UNIT_TABLES[quantity], start=1)
        )
        lines.append(f"   {placeholder} {title}: {choices}")

    labels = resolve(selection)
    width = max(len(title) for _, title in _QUANTITY_TITLES.values())
    lines.append("")
    lines.append(f" {heading} units ({selection}):")
    for quantity, (_, title) in _QUANTITY_TITLES.items():
        lines.append(f"  -{title.ljust(width)}: {getattr(labels, quantity)}")
    return "\n".join(lines)
