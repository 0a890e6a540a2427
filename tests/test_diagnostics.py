import pytest

from fieldbuddy import diagnostics as D
from fieldbuddy.calibration import HealthThresholds, ChargeBands
from fieldbuddy.diagnostics import HealthMessage


@pytest.mark.parametrize("code,expected", [
    ("R410A", "R410A"), ("r-410a", "R410A"), ("R 22", "R22"), ("r454b", "R454B"),
    ("R-32", "R32"), ("R999", "R410A"), ("", "R410A"), (None, "R410A"),
])
def test_normalize_refrigerant(code, expected):
    assert D.normalize_refrigerant(code) == expected


def test_pt_tables_ascending():
    for table in D.PT_TABLES.values():
        psig = [p.psig for p in table]
        assert psig == sorted(psig)


@pytest.mark.parametrize("psig,ref,expected", [
    (50, "R410A", 26.0),     # below table: clamp to first entry
    (90, "R410A", 26.0),
    (100, "R410A", 29.5),
    (120, "R410A", 36.0),
    (400, "R410A", 85.0),    # above table: clamp to last entry
    (75, "R22", 40.0),
    (100, "R454B", 25.5),
    (100, "R32", 19.0),
    (100, "R-unknown", 29.5),
])
def test_saturation_temp(psig, ref, expected):
    assert D.psig_to_saturation_temp(psig, ref) == pytest.approx(expected)


def test_saturation_temp_non_finite():
    assert D.psig_to_saturation_temp(float("nan")) is None
    assert D.psig_to_saturation_temp(None) is None


def test_derived_readings():
    assert D.calc_delta_t(75, 57) == pytest.approx(18.0)
    assert D.calc_superheat(118, 52, "R410A") == pytest.approx(16.6)
    assert D.calc_subcool(300, 67, "R410A") == pytest.approx(10.0)
    assert D.calc_subcool(300, 80, "R410A") == pytest.approx(-3.0)


def test_derived_readings_invalid():
    assert D.calc_delta_t(float("nan"), 55) is None
    assert D.calc_superheat(118, None) is None
    assert D.calc_subcool(float("inf"), 70) is None


def test_airflow_by_tonnage():
    a = D.airflow_by_tonnage(3)
    assert (a.nominal, a.low, a.high) == (1200, 1050, 1260)
    a = D.airflow_by_tonnage(2.5)
    assert (a.nominal, a.low, a.high) == (1000, 875, 1050)
    assert D.airflow_by_tonnage(float("nan")) is None


def test_airflow_by_area():
    a = D.airflow_by_area(1500)
    assert (a.nominal, a.low, a.high) == (1200, 1050, 1260)
    a = D.airflow_by_area(1234)
    assert (a.nominal, a.low, a.high) == (987, 864, 1036)
    assert D.airflow_by_area(0) is None
    assert D.airflow_by_area(-100) is None
    assert D.airflow_by_area(float("nan")) is None


def test_friction_rate_with_side_drops():
    assert D.friction_rate(0.5, 0.1, 0.1, 100) == pytest.approx(0.3)
    assert D.friction_rate(0.5) == pytest.approx(0.333)
    assert D.friction_rate(0.2, 0.2, 0.1, 100) < 0
    assert D.friction_rate(0.5, 0.1, 0.1, 0) is None


def test_targets_for():
    t = D.targets_for("R410A", "txv")
    assert t.delta_t_range == (16, 22)
    assert (t.target_subcool, t.target_sh) == (10, 10)
    t = D.targets_for("R-22", "fixed")
    assert (t.target_subcool, t.target_sh) == (8, 12)


def test_delta_t_low_boundary_is_ok():
    assert D.evaluate_cooling_health(delta_t=14, metering_device="txv") == [
        HealthMessage("ok", "Delta-T in expected range (14°F).")
    ]


def test_delta_t_out_of_range():
    low, = D.evaluate_cooling_health(delta_t=13.9)
    assert low.level == "warn"
    assert low.message.startswith("Low delta-T (13.9°F).")
    high, = D.evaluate_cooling_health(delta_t=24.5)
    assert high.level == "warn"
    assert high.message.startswith("High delta-T (24.5°F).")


def test_txv_and_fixed_superheat_bands_diverge():
    txv, = D.evaluate_cooling_health(superheat=7, metering_device="txv")
    fixed, = D.evaluate_cooling_health(superheat=7, metering_device="fixed")
    assert txv == HealthMessage("ok", "Superheat reasonable (7°F).")
    assert fixed == HealthMessage("warn", "Low superheat (7°F). Potential overcharge or low airflow.")


def test_superheat_nine_sits_inside_both_bands():
    assert D.evaluate_cooling_health(superheat=9, metering_device="txv")[0].level == "ok"
    assert D.evaluate_cooling_health(superheat=9, metering_device="fixed")[0].level == "ok"


def test_message_order_by_metering_device():
    txv = D.evaluate_cooling_health(delta_t=18, superheat=10, subcool=10, metering_device="TXV")
    assert [m.message for m in txv] == [
        "Delta-T in expected range (18°F).",
        "Subcool looks good (10°F).",
        "Superheat reasonable (10°F).",
    ]
    fixed = D.evaluate_cooling_health(delta_t=18, superheat=10, subcool=10, metering_device="fixed")
    assert [m.message for m in fixed] == [
        "Delta-T in expected range (18°F).",
        "Superheat acceptable for fixed orifice (10°F).",
        "Subcool within expected range (10°F).",
    ]


def test_missing_metrics_are_skipped():
    assert D.evaluate_cooling_health() == []
    assert D.evaluate_cooling_health(delta_t=float("nan"), subcool=None) == []


def test_fixed_subcool_limits():
    assert D.evaluate_cooling_health(subcool=4, metering_device="fixed")[0].message == (
        "Low subcool (4°F). Often undercharge on fixed orifice."
    )
    assert D.evaluate_cooling_health(subcool=16, metering_device="fixed")[0].level == "warn"
    assert D.evaluate_cooling_health(subcool=15, metering_device="fixed")[0].level == "ok"


def test_tuned_thresholds():
    strict = HealthThresholds(delta_t_low=16)
    assert D.evaluate_cooling_health(delta_t=15, thresholds=strict)[0].level == "warn"
    assert D.evaluate_cooling_health(delta_t=15)[0].level == "ok"


@pytest.mark.parametrize("subcool,key", [
    (7, "txv_low"), (8, "txv_ok"), (12, "txv_ok"), (12.5, "txv_high"), (None, "txv_missing"),
])
def test_charge_advice_txv(subcool, key):
    assert D.suggest_charge_adjust(superheat=30, subcool=subcool, metering_device="txv") == D.ADVICE[key]


@pytest.mark.parametrize("superheat,key", [
    (16, "fixed_high"), (15, "fixed_ok"), (9, "fixed_ok"), (8.9, "fixed_low"), (float("nan"), "fixed_missing"),
])
def test_charge_advice_fixed(superheat, key):
    assert D.suggest_charge_adjust(superheat=superheat, subcool=0, metering_device="fixed") == D.ADVICE[key]


def test_charge_advice_custom_target_and_band():
    msg = D.suggest_charge_adjust(subcool=7, metering_device="txv", target_subcool=8, bands=ChargeBands(subcool=1))
    assert msg == D.ADVICE["txv_ok"]


def test_charge_advice_is_never_a_quantity():
    for text in D.ADVICE.values():
        assert "lb" not in text and "oz" not in text
