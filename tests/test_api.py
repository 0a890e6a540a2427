import pytest
from pydantic import ValidationError

from fieldbuddy import api
from fieldbuddy.io import load_catalog


def test_plan_dict_and_text():
    out = api.sub_plenum_plan({"total_cfm": 1200})
    assert out["total_cfm"] == 1200
    assert [sp["cfm"] for sp in out["sub_plenums"]] == [480, 420, 300]
    assert out["sub_plenums"][0]["branches"][0]["suggestion"] == '6" round @ ~489 FPM'
    assert out["returns"]["grille_sizes"][0] == {"w": 16, "h": 25, "fpm": 432, "face_area_ft2": pytest.approx(2.778)}
    assert out["text"].startswith("Total CFM: 1200 ")


def test_plan_equal_split():
    out = api.sub_plenum_plan({"total_cfm": 1000, "split": 4})
    assert [sp["cfm"] for sp in out["sub_plenums"]] == [250, 250, 250, 250]


@pytest.mark.parametrize("inputs", [
    {"total_cfm": 0},
    {"total_cfm": 1200, "split": []},
    {"total_cfm": 1200, "split": [0, 0]},
    {"total_cfm": 1200, "split": 0},
    {"total_cfm": 1200, "bogus": 1},
])
def test_plan_validation(inputs):
    with pytest.raises(ValidationError):
        api.sub_plenum_plan(inputs)


def test_plan_rounding_to_zero_is_backend_error():
    with pytest.raises(api.BackendError):
        api.sub_plenum_plan({"total_cfm": 0.2})


def test_duct_size():
    r = api.duct_size("round", {"cfm": 400, "target_fpm": 700})
    assert (r["dia"], r["fpm"]) == (10, 733)
    assert r["suggestion"] == '10" round @ ~733 FPM'
    rect = api.duct_size("rect", {"cfm": 800, "target_fpm": 800, "aspect": 2})
    assert (rect["w"], rect["h"], rect["fpm"]) == (17, 8, 847)
    assert rect["suggestion"] == "17×8 @ ~847 FPM"
    with pytest.raises(ValueError):
        api.duct_size("oval", {"cfm": 400})


def test_returns_guidance():
    out = api.returns_guidance({"cfm": 1200})
    assert out["area_ft2"] == pytest.approx(2.4)
    assert len(out["grille_sizes"]) == 5
    # a single register is far over 500 FPM at this flow; the largest ranks first
    assert (out["supply_registers"][0]["w"], out["supply_registers"][0]["h"]) == (6, 12)


def test_friction_quick_and_split():
    assert api.friction({"total_esp": 0.5, "eql_ft": 150, "drops": 0.2})["friction_rate"] == pytest.approx(0.2)
    out = api.friction({"total_esp": 0.5, "eql_ft": 100, "supply_drop": 0.1, "return_drop": 0.1})
    assert out["friction_rate"] == pytest.approx(0.3)
    neg = api.friction({"total_esp": 0.3, "drops": 0.5})
    assert neg["feasible"] is False


def test_equivalent_length_reports_unknown_fittings():
    out = api.equivalent_length([
        {"length_ft": 20, "type": "elbow-90-smooth"},
        {"length_ft": 10, "type": "swirl"},
        {"length_ft": 5},
    ])
    assert out == {"eql_ft": 50, "unknown_fittings": ["swirl"]}


def test_saturation():
    assert api.saturation({"psig": 100, "refrigerant": "r-410a"}) == {"refrigerant": "R410A", "psig": 100, "sat_f": 29.5}


def test_diagnose_full_readings():
    out = api.diagnose({
        "refrigerant": "R410A", "metering_device": "TXV",
        "return_f": 75, "supply_f": 57,
        "suction_psig": 118, "suction_line_f": 52,
        "liquid_psig": 300, "liquid_line_f": 67,
        "tons": 3,
    })
    assert out["metering_device"] == "txv"
    assert out["delta_t"] == pytest.approx(18.0)
    assert out["superheat"] == pytest.approx(16.6)
    assert out["subcool"] == pytest.approx(10.0)
    assert out["evap_sat_f"] == pytest.approx(35.4)
    assert out["cond_sat_f"] == pytest.approx(77.0)
    assert [m["level"] for m in out["messages"]] == ["ok", "ok", "ok"]
    assert out["levels"] == {"delta_t": "ok", "superheat": "ok", "subcool": "ok"}
    assert out["advice"].startswith("Charge appears close for TXV")
    assert out["airflow"] == {"nominal": 1200, "low": 1050, "high": 1260}


def test_diagnose_partial_readings():
    out = api.diagnose({"metering_device": "fixed", "suction_psig": 118, "suction_line_f": 60})
    assert out["delta_t"] is None and out["subcool"] is None
    assert out["superheat"] == pytest.approx(24.6)
    assert out["levels"]["superheat"] == "ok"
    assert out["levels"]["delta_t"] is None
    assert out["advice"].startswith("Superheat high")
    assert out["airflow"] is None


def test_diagnose_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        api.diagnose({"suction": 118})


def test_charge_advice():
    assert api.charge_advice({"subcool": 5})["advice"].startswith("Subcool low")


def test_airflow_and_pt_curve():
    assert api.airflow(2)["nominal"] == 800
    curve = api.pt_curve("R22")
    assert curve["psig"][0] == 50 and curve["sat_f"][0] == 28
    with pytest.raises(api.BackendError):
        api.airflow(float("nan"))


def test_airflow_by_floor_area():
    assert api.airflow(sqft=1500) == {"nominal": 1200, "low": 1050, "high": 1260}
    assert api.airflow(tons=2, sqft=1500)["nominal"] == 800
    with pytest.raises(api.BackendError):
        api.airflow()
    with pytest.raises(api.BackendError):
        api.airflow(sqft=0)


def test_diagnose_airflow_from_floor_area():
    out = api.diagnose({"sqft": 1000})
    assert out["airflow"] == {"nominal": 800, "low": 700, "high": 840}
    out = api.diagnose({"sqft": 1000, "tons": 3})
    assert out["airflow"]["nominal"] == 1200


def test_takeoff_with_prices():
    out = api.takeoff(
        [
            {"category": "Refrigerant", "name": "R-410A 25 lb cylinder", "qty": 1},
            {"category": "Refrigerant", "name": "R-410A 25 lb cylinder", "qty": 1},
            {"category": "Filters & Drain", "name": "Drain tablets", "qty": 3},
        ],
        load_catalog(),
    )
    assert "2 × R-410A 25 lb cylinder  —  Refrigerant" in out["text"]
    assert out["subtotal"] == pytest.approx(578.0)
    assert out["missing_prices"] == ["Drain tablets (Filters & Drain)"]


def test_takeoff_without_catalog():
    out = api.takeoff([])
    assert out == {"text": "Nothing selected.", "cost_lines": [], "subtotal": 0.0, "missing_prices": []}
