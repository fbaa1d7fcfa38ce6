"""Tests for calculation requests and URL construction."""

import pytest
from pydantic import ValidationError

from fluidfetch.calculations import (
    REQUEST_TYPES,
    IsobarRequest,
    IsochoreRequest,
    IsothermRequest,
    SaturationByPressureRequest,
    SaturationByTemperatureRequest,
    build,
)
from fluidfetch.units import UnitSelection, resolve

BASE = "https://webbook.nist.gov/cgi/fluid.cgi"


@pytest.fixture
def water_isotherm():
    return IsothermRequest(
        substance_id="C7732185",
        temperature=725.5,
        p_low=1.0,
        p_high=10.0,
        p_inc=0.5,
        units=UnitSelection.si(),
    )


# ==============================================================================
# URL construction
# ==============================================================================

class TestBuild:
    def test_isotherm_query(self, water_isotherm):
        plan = build(water_isotherm, resolve(water_isotherm.units), base_url=BASE)
        assert "Type=IsoTherm&T=725.5&PLow=1.0&PHigh=10.0&PInc=0.5" in plan.data_url
        assert plan.query.startswith("ID=C7732185&RefState=DEF&TUnit=K&PUnit=MPa&DUnit=kg%2Fm3")
        assert plan.query.endswith("&Digits=5")

    def test_prime_and_data_share_query(self, water_isotherm):
        plan = build(water_isotherm, resolve(water_isotherm.units), base_url=BASE)
        assert plan.prime_url == f"{BASE}?Action=Load&{plan.query}"
        assert plan.data_url == f"{BASE}?Action=Data&Wide=on&{plan.query}"

    def test_isotherm_default_units(self):
        request = IsothermRequest(
            substance_id="C7732185", temperature=725.5, p_low=1.0, p_high=10.0, p_inc=0.5
        )
        plan = build(request, resolve(request.units), base_url=BASE)
        assert plan.query == (
            "ID=C7732185&RefState=DEF"
            "&TUnit=K&PUnit=bar&DUnit=g%2Fml&HUnit=kJ%2Fmol&WUnit=m%2Fs&VisUnit=Pa*s&STUnit=N%2Fm"
            "&Type=IsoTherm&T=725.5&PLow=1.0&PHigh=10.0&PInc=0.5&Digits=5"
        )
        assert plan.output_name == "fluids_isotherm.dat"

    def test_large_and_small_numbers_in_plain_notation(self):
        request = IsobarRequest(substance_id="C7732185", pressure=1e16, t_low=300, t_high=400, t_inc=1e-7)
        query = build(request, resolve(request.units)).query
        assert "P=10000000000000000&" in query
        assert "TInc=0.0000001&" in query
        assert "+" not in query and "e-" not in query

    def test_default_output_name(self, water_isotherm):
        plan = build(water_isotherm, resolve(water_isotherm.units))
        assert plan.output_name == "fluids_isotherm.dat"

    def test_custom_prefix(self, water_isotherm):
        plan = build(water_isotherm, resolve(water_isotherm.units), prefix="water")
        assert plan.output_name == "water_isotherm.dat"

    @pytest.mark.parametrize("request_obj,expected,tag", [
        (
            IsobarRequest(substance_id="C7732185", pressure=1.0, t_low=300, t_high=400, t_inc=10),
            "Type=IsoBar&P=1.0&TLow=300.0&THigh=400.0&TInc=10.0",
            "isobar",
        ),
        (
            IsochoreRequest(substance_id="C7732185", density=0.5, t_low=300, t_high=400),
            "Type=IsoChor&D=0.5&TLow=300.0&THigh=400.0&TInc=1.0",
            "isochor",
        ),
        (
            SaturationByPressureRequest(substance_id="C7732185", p_low=1, p_high=2, p_inc=0.1),
            "Type=SatT&PLow=1.0&PHigh=2.0&PInc=0.1",
            "satT",
        ),
        (
            SaturationByTemperatureRequest(substance_id="C7732185", t_low=300, t_high=350, t_inc=5),
            "Type=SatP&TLow=300.0&THigh=350.0&TInc=5.0",
            "satP",
        ),
    ])
    def test_variant_parameters(self, request_obj, expected, tag):
        plan = build(request_obj, resolve(request_obj.units))
        assert f"&{expected}&Digits=5" in plan.query
        assert plan.output_name == f"fluids_{tag}.dat"

    def test_ref_state_and_digits(self):
        request = IsobarRequest(
            substance_id="C7727379", pressure=1, t_low=80, t_high=90, ref_state="NBP", digits=8
        )
        plan = build(request, resolve(request.units))
        assert "ID=C7727379&RefState=NBP&" in plan.query
        assert plan.query.endswith("Digits=8")

    def test_request_types_by_tag(self):
        assert set(REQUEST_TYPES) == {"isobar", "isotherm", "isochor", "satT", "satP"}
        assert REQUEST_TYPES["satT"] is SaturationByPressureRequest


# ==============================================================================
# Validation
# ==============================================================================

class TestValidation:
    def test_requests_are_immutable(self, water_isotherm):
        with pytest.raises(ValidationError):
            water_isotherm.temperature = 300.0

    def test_blank_substance_id(self):
        with pytest.raises(ValidationError):
            IsothermRequest(substance_id="  ", temperature=300, p_low=1, p_high=2)

    def test_substance_id_with_ampersand(self):
        with pytest.raises(ValidationError):
            IsothermRequest(substance_id="C7732185&Type=X", temperature=300, p_low=1, p_high=2)

    @pytest.mark.parametrize("ref_state", ["DEF&Type=SatP", "NBP IIR", "A=B", "  "])
    def test_ref_state_must_be_single_token(self, ref_state):
        with pytest.raises(ValidationError, match="ref_state"):
            IsobarRequest(substance_id="C7732185", pressure=1, t_low=300, t_high=400, ref_state=ref_state)

    def test_ref_state_is_stripped(self):
        request = IsobarRequest(substance_id="C7732185", pressure=1, t_low=300, t_high=400, ref_state=" NBP ")
        assert request.ref_state == "NBP"
        assert build(request, resolve(request.units)).query.count("Type=") == 1

    def test_inverted_range(self):
        with pytest.raises(ValidationError, match="below"):
            IsobarRequest(substance_id="C7732185", pressure=1, t_low=400, t_high=300)

    def test_non_positive_increment(self):
        with pytest.raises(ValidationError):
            IsothermRequest(substance_id="C7732185", temperature=300, p_low=1, p_high=2, p_inc=0)

    def test_non_positive_density(self):
        with pytest.raises(ValidationError):
            IsochoreRequest(substance_id="C7732185", density=0, t_low=300, t_high=400)

    def test_unknown_field(self):
        with pytest.raises(ValidationError):
            SaturationByPressureRequest(substance_id="C7732185", p_low=1, p_high=2, temperature=3)

    def test_summary_uses_unit_labels(self, water_isotherm):
        rows = dict(water_isotherm.summary(resolve(water_isotherm.units)))
        assert rows["T/K"] == "725.5"
        assert rows["P(inc)/MPa"] == "0.5"
