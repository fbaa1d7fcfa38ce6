"""Tests for unit codes, presets and label resolution."""

import pytest

from fluidfetch.exceptions import InvalidUnitCode, UsageError
from fluidfetch.units import (
    DENSITY_UNITS,
    ENERGY_UNITS,
    ENTROPY_UNITS,
    UNIT_TABLES,
    VOLUME_UNITS,
    UnitSelection,
    describe_units,
    parse_unit_override,
    resolve,
    select_units,
    url_token,
)


# ==============================================================================
# Selection
# ==============================================================================

class TestUnitSelection:
    def test_default_codes(self):
        assert UnitSelection.default().codes() == (1, 2, 3, 1, 1, 2, 1)
        assert str(UnitSelection.default()) == "1 2 3 1 1 2 1"

    def test_si_codes(self):
        assert UnitSelection.si().codes() == (1, 1, 4, 1, 1, 2, 1)

    @pytest.mark.parametrize("quantity", list(UNIT_TABLES))
    def test_code_zero_rejected(self, quantity):
        with pytest.raises(InvalidUnitCode) as exc_info:
            UnitSelection(**{quantity: 0})
        assert exc_info.value.quantity == quantity
        assert exc_info.value.code == 0

    @pytest.mark.parametrize("quantity,table", list(UNIT_TABLES.items()))
    def test_code_past_end_rejected(self, quantity, table):
        with pytest.raises(InvalidUnitCode) as exc_info:
            UnitSelection(**{quantity: len(table) + 1})
        assert f"1..{len(table)}" in str(exc_info.value)

    def test_invalid_unit_code_is_usage_error(self):
        with pytest.raises(UsageError):
            UnitSelection(pressure=9)

    def test_wrong_code_count(self):
        with pytest.raises(UsageError, match="Expected 7 unit codes"):
            UnitSelection.from_codes([1, 2, 3])


# ==============================================================================
# Resolution
# ==============================================================================

class TestResolve:
    def test_default_labels(self):
        labels = resolve(UnitSelection.default())
        assert labels.temperature == "K"
        assert labels.pressure == "bar"
        assert labels.density == "g/ml"
        assert labels.energy == "kJ/mol"
        assert labels.velocity == "m/s"
        assert labels.viscosity == "Pa*s"
        assert labels.surface_tension == "N/m"
        assert labels.volume == "ml/g"
        assert labels.entropy == "J/mol*K"

    def test_si_labels(self):
        labels = resolve(UnitSelection.si())
        assert labels.pressure == "MPa"
        assert labels.density == "kg/m3"
        assert labels.volume == "m3/kg"
        assert labels.energy == "kJ/mol"

    @pytest.mark.parametrize("quantity,table", list(UNIT_TABLES.items()))
    def test_every_code_resolves_to_its_label(self, quantity, table):
        for code, label in enumerate(table, start=1):
            labels = resolve(UnitSelection(**{quantity: code}))
            assert getattr(labels, quantity) == label

    def test_volume_follows_density(self):
        for code in range(1, len(DENSITY_UNITS) + 1):
            assert resolve(UnitSelection(density=code)).volume == VOLUME_UNITS[code - 1]

    def test_entropy_follows_energy(self):
        for code in range(1, len(ENERGY_UNITS) + 1):
            assert resolve(UnitSelection(energy=code)).entropy == ENTROPY_UNITS[code - 1]

    def test_url_token_escapes_slash(self):
        assert url_token("lb-mole/ft3") == "lb-mole%2Fft3"
        assert url_token("K") == "K"

    def test_query_string_order(self):
        labels = resolve(UnitSelection.default())
        assert labels.query_string() == (
            "TUnit=K&PUnit=bar&DUnit=g%2Fml&HUnit=kJ%2Fmol"
            "&WUnit=m%2Fs&VisUnit=Pa*s&STUnit=N%2Fm"
        )


# ==============================================================================
# Override parsing and selection
# ==============================================================================

class TestOverride:
    def test_parse_override(self):
        selection = parse_unit_override("1 1 4 2 1 2 1")
        assert selection.codes() == (1, 1, 4, 2, 1, 2, 1)
        assert resolve(selection).energy == "kJ/kg"

    def test_extra_whitespace_is_fine(self):
        assert parse_unit_override("  1 2  3 1 1 2 1 ").codes() == (1, 2, 3, 1, 1, 2, 1)

    @pytest.mark.parametrize("value", ["", "1 2 3", "1 1 4 2 1 2 1 1"])
    def test_wrong_count(self, value):
        with pytest.raises(UsageError, match="Number of unit codes mismatch"):
            parse_unit_override(value)

    def test_non_integer(self):
        with pytest.raises(UsageError, match="must be integers"):
            parse_unit_override("1 a 4 2 1 2 1")

    def test_out_of_range(self):
        with pytest.raises(InvalidUnitCode):
            parse_unit_override("5 1 1 1 1 1 1")

    def test_override_wins_over_si(self):
        selection, heading = select_units(si=True, override="2 2 2 2 2 2 2")
        assert selection.codes() == (2,) * 7
        assert heading == "Actual"

    def test_si_wins_over_default(self):
        selection, heading = select_units(si=True, default=UnitSelection(temperature=2))
        assert selection == UnitSelection.si()
        assert heading == "SI"

    def test_configured_default(self):
        configured = UnitSelection(temperature=2)
        assert select_units(default=configured) == (configured, "Default")
        assert select_units() == (UnitSelection.default(), "Default")


class TestDescribeUnits:
    def test_lists_choices_and_active_units(self):
        text = describe_units(UnitSelection.si(), "SI")
        assert "%p Pressure: 1=MPa, 2=bar, 3=atm, 4=torr, 5=psia" in text
        assert "SI units (1 1 4 1 1 2 1):" in text
        assert "kg/m3" in text
