"""
Classification and annotation of WebBook property tables.

The data request returns a whitespace-delimited table whose first line
repeats the column titles and whose remaining lines are data rows. The
layout is identified solely by its column count, taken from the last row:

- 14 columns: single-phase properties
- 28 columns: saturation properties (liquid + vapor), with quality,
  without surface tension
- 25 columns: saturation properties (liquid + vapor) with surface tension

Each count maps to a Legend listing the column names with unit fields that
are filled from the resolved UnitLabels. Unknown counts are written through
without a legend.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from fluidfetch.exceptions import FormatError
from fluidfetch.units import UnitLabels

logger = logging.getLogger(__name__)

DEFAULT_CITATION = "NIST Chemistry WebBook (https://webbook.nist.gov/chemistry/)"
RULE = "# " + "-" * 75


@dataclass(frozen=True)
class Legend:
    """Column titles for one table layout.

    Titles are ``str.format`` templates over the UnitLabels fields, e.g.
    ``"Joule-Thomson ({temperature}/{pressure})"``.
    """

    key: str
    title: str
    columns: Tuple[str, ...]
    per_line: int = 2

    @property
    def column_count(self) -> int:
        return len(self.columns)

    def labels(self, units: UnitLabels) -> List[str]:
        values = units.as_dict()
        return [column.format(**values) for column in self.columns]


SINGLE_PHASE = Legend(
    key="single-phase",
    title="single-phase properties",
    per_line=3,
    columns=(
        "Temperature ({temperature})",
        "Pressure ({pressure})",
        "Density ({density})",
        "Volume ({volume})",
        "Int. Energy ({energy})",
        "Enthalpy ({energy})",
        "Entropy ({entropy})",
        "Cv ({entropy})",
        "Cp ({entropy})",
        "Sound Spd. ({velocity})",
        "Joule-Thomson ({temperature}/{pressure})",
        "Viscosity ({viscosity})",
        "Therm. Cond. (W/m*K)",
        "Phase",
    ),
)

SATURATION_WITH_QUALITY = Legend(
    key="saturation",
    title="two-phase saturation properties without surface tension",
    columns=(
        "Temperature ({temperature})",
        "Pressure ({pressure})",
        "Quality (l+v)",
        "Internal Energy (l+v, {energy})",
        "Enthalpy (l+v, {energy})",
        "Entropy (l+v, {entropy})",
        "Density (l, {density})",
        "Volume (l, {volume})",
        "Internal Energy (l, {energy})",
        "Enthalpy (l, {energy})",
        "Entropy (l, {entropy})",
        "Cv (l, {entropy})",
        "Cp (l, {entropy})",
        "Sound Spd. (l, {velocity})",
        "Joule-Thomson (l, {temperature}/{pressure})",
        "Viscosity (l, {viscosity})",
        "Therm. Cond. (l, W/m*K)",
        "Density (v, {density})",
        "Volume (v, {volume})",
        "Internal Energy (v, {energy})",
        "Enthalpy (v, {energy})",
        "Entropy (v, {entropy})",
        "Cv (v, {entropy})",
        "Cp (v, {entropy})",
        "Sound Spd. (v, {velocity})",
        "Joule-Thomson (v, {temperature}/{pressure})",
        "Viscosity (v, {viscosity})",
        "Therm. Cond. (v, W/m*K)",
    ),
)

SATURATION_WITH_SURFACE_TENSION = Legend(
    key="saturation-surface-tension",
    title="two-phase saturation properties with surface tension",
    columns=(
        "Temperature ({temperature})",
        "Pressure ({pressure})",
        "Density (l, {density})",
        "Volume (l, {volume})",
        "Internal Energy (l, {energy})",
        "Enthalpy (l, {energy})",
        "Entropy (l, {entropy})",
        "Cv (l, {entropy})",
        "Cp (l, {entropy})",
        "Sound Spd. (l, {velocity})",
        "Joule-Thomson (l, {temperature}/{pressure})",
        "Viscosity (l, {viscosity})",
        "Therm. Cond. (l, W/m*K)",
        "Surf. Tension (l, {surface_tension})",
        "Density (v, {density})",
        "Volume (v, {volume})",
        "Internal Energy (v, {energy})",
        "Enthalpy (v, {energy})",
        "Entropy (v, {entropy})",
        "Cv (v, {entropy})",
        "Cp (v, {entropy})",
        "Sound Spd. (v, {velocity})",
        "Joule-Thomson (v, {temperature}/{pressure})",
        "Viscosity (v, {viscosity})",
        "Therm. Cond. (v, W/m*K)",
    ),
)


@dataclass
class LegendRegistry:
    """Column count -> Legend, versioned with the WebBook output it matches."""

    version: int
    legends: Dict[int, Legend] = field(default_factory=dict)

    def register(self, legend: Legend) -> None:
        if legend.column_count in self.legends:
            raise ValueError(f"A legend for {legend.column_count} columns is already registered")
        self.legends[legend.column_count] = legend

    def get(self, column_count: int) -> Optional[Legend]:
        return self.legends.get(column_count)

    def known_counts(self) -> List[int]:
        return sorted(self.legends)


def default_registry() -> LegendRegistry:
    registry = LegendRegistry(version=1)
    for legend in (SINGLE_PHASE, SATURATION_WITH_QUALITY, SATURATION_WITH_SURFACE_TENSION):
        registry.register(legend)
    return registry


@dataclass(frozen=True)
class ClassifiedTable:
    lines: Tuple[str, ...]
    column_count: int
    legend: Optional[Legend]

    @property
    def recognized(self) -> bool:
        return self.legend is not None

    @property
    def data_lines(self) -> Tuple[str, ...]:
        """All lines except the first, which echoes the column titles."""
        return self.lines[1:]

    @property
    def data_points(self) -> int:
        return len(self.data_lines)


def classify(body: str, registry: Optional[LegendRegistry] = None) -> ClassifiedTable:
    """Pick the legend matching the word count of the body's last line."""
    registry = registry or default_registry()
    lines = body.splitlines()
    while lines and not lines[-1].strip():
        lines.pop()

    column_count = len(lines[-1].split()) if lines else 0
    legend = registry.get(column_count)
    if legend is None:
        logger.warning(
            f"Unrecognized table format: {column_count} columns "
            f"(known: {registry.known_counts()})"
        )
    else:
        logger.info(f"Found {column_count} columns: {legend.title}")
    return ClassifiedTable(lines=tuple(lines), column_count=column_count, legend=legend)


def format_error(table: ClassifiedTable, registry: Optional[LegendRegistry] = None) -> Optional[FormatError]:
    """The warning to report for an unrecognized table, or None."""
    if table.recognized:
        return None
    registry = registry or default_registry()
    return FormatError(table.column_count, known=registry.known_counts())


def _align(rows: Iterable[List[str]]) -> List[str]:
    rows = list(rows)
    widths: Dict[int, int] = {}
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths.get(i, 0), len(cell))
    return ["  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip() for row in rows]


def render_legend(legend: Legend, units: UnitLabels) -> List[str]:
    """Numbered, column-aligned legend lines, each starting with '#'."""
    cells = [f"{number:2d}) {label}" for number, label in enumerate(legend.labels(units), start=1)]
    rows = [cells[i:i + legend.per_line] for i in range(0, len(cells), legend.per_line)]
    return [f"# {line}" for line in _align(rows)]


def classify_and_annotate(
    body: str,
    units: UnitLabels,
    registry: Optional[LegendRegistry] = None,
) -> Tuple[List[str], List[str]]:
    """Split a response into (legend lines, data lines).

    For an unrecognized format the legend is empty and the body is kept
    whole, including its first line.
    """
    table = classify(body, registry)
    if not table.recognized:
        return [], list(table.lines)
    return render_legend(table.legend, units), list(table.data_lines)


def render_output(
    table: ClassifiedTable,
    units: UnitLabels,
    substance_label: str,
    tag: str,
    timestamp: Optional[datetime] = None,
    citation: str = DEFAULT_CITATION,
) -> str:
    """Compose the output file: provenance, legend (if known), data."""
    timestamp = timestamp or datetime.now()
    lines = [
        f"# Fluid properties from {citation}",
        f"# {substance_label} ({tag}) {timestamp:%c}",
        RULE,
    ]
    if table.recognized:
        lines.extend(render_legend(table.legend, units))
        lines.extend(table.data_lines)
    else:
        lines.extend(table.lines)
    return "\n".join(lines) + "\n"


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def write_output(path: Path, text: str) -> Path:
    """Write text through a scratch file in the target directory.

    The scratch file is renamed onto ``path`` on success and removed on
    failure, so an aborted run never leaves a partial table behind.
    """
    path = Path(path)
    directory = path.parent
    directory.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        # mkstemp creates 0600; give the file the mode a plain open() would
        os.chmod(tmp_name, 0o666 & ~_current_umask())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.info(f"Wrote {path}")
    return path
