from fieldbuddy import diagnostics, ductsizing, engine
from fieldbuddy.engine import FieldEngine


def test_facade_namespaces():
    assert FieldEngine.duct is ductsizing
    assert FieldEngine.diagnostics is diagnostics
    assert FieldEngine.duct.split_cfm(100, 3) == [34, 33, 33]
    assert FieldEngine.diagnostics.psig_to_saturation_temp(100, "R410A") == 29.5


def test_flat_exports_are_the_engine_functions():
    assert engine.split_cfm is ductsizing.split_cfm
    assert engine.evaluate_cooling_health is diagnostics.evaluate_cooling_health
    for name in engine.__all__:
        assert hasattr(engine, name), name
