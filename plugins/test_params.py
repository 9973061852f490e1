#!/usr/bin/env python3
"""
Tests for the galaxy parameter model.

Verifies:
1. Defaults and hex color parsing
2. Legal ranges are enforced (rejected, never clamped)
3. ParameterModel set / commit / revert semantics
4. Presets all validate
"""

import math

import pytest

from galaxy_field.colors import lerp_colors, parse_color, to_rgb255
from galaxy_field.errors import ValidationError
from galaxy_field.params import (
    MAX_COUNT, SLIDER_DEFS, ParameterModel, ParticleFieldParameters,
    coerce_params, resolve_field,
)
from galaxy_field.presets import PRESET_ORDER, PRESETS, get_preset, list_presets, preset_parameters


def test_defaults():
    print("Testing defaults...")
    p = ParticleFieldParameters()
    assert p.count == 100_000
    assert p.particle_size == 0.01
    assert p.radius == 5.0
    assert p.branches == 3
    assert p.spin == 1.0
    assert p.randomness == 0.2
    assert p.randomness_power == 3.0
    assert p.inside_color == (1.0, 0x60 / 255, 0x30 / 255)
    assert to_rgb255(p.outside_color) == (0x1b, 0x39, 0x84)
    print("  ✓ defaults match the debug panel")


def test_parse_color():
    assert parse_color("#fff") == (1.0, 1.0, 1.0)
    assert parse_color("ff0000") == (1.0, 0.0, 0.0)
    assert parse_color([0.25, 0.5, 1]) == (0.25, 0.5, 1.0)
    for bad in ("#ff00", "#gggggg", (0.1, 0.2), (0.5, 1.5, 0.0), (-0.1, 0, 0), 7):
        with pytest.raises(ValueError):
            parse_color(bad)


def test_lerp_colors_endpoints():
    mixed = lerp_colors((1.0, 0.0, 0.0), (0.0, 0.0, 1.0), [0.0, 0.5, 1.0])
    assert mixed[0].tolist() == [1.0, 0.0, 0.0]
    assert mixed[1].tolist() == [0.5, 0.0, 0.5]
    assert mixed[2].tolist() == [0.0, 0.0, 1.0]


def test_camel_case_aliases():
    p = ParticleFieldParameters(particleSize=0.05, randomnessPower=2,
                                insideColor="#000000", outsideColor=(1, 1, 1))
    assert p.particle_size == 0.05
    assert p.randomness_power == 2.0
    assert p.inside_color == (0.0, 0.0, 0.0)
    assert resolve_field("insideColor") == "inside_color"
    assert resolve_field("spin") == "spin"


@pytest.mark.parametrize("field, value", [
    ("count", 0),
    ("count", -5),
    ("count", MAX_COUNT + 1),
    ("count", 10.5),
    ("particle_size", 0.0),
    ("radius", -1.0),
    ("radius", math.inf),
    ("branches", 0),
    ("spin", math.nan),
    ("randomness", -0.01),
    ("randomness_power", 0.99),
    ("inside_color", (1.2, 0.0, 0.0)),
    ("outside_color", "#12"),
])
def test_out_of_range_rejected(field, value):
    with pytest.raises(ValidationError) as info:
        ParameterModel().set(field, value)
    assert info.value.field == field


@pytest.mark.parametrize("field", ["count", "branches", "radius", "spin", "randomness_power"])
def test_booleans_rejected(field):
    model = ParameterModel()
    before = model.get()
    for flag in (True, False):
        with pytest.raises(ValidationError) as info:
            model.set(field, flag)
        assert info.value.field == field
    assert model.get() is before
    with pytest.raises(ValidationError):
        coerce_params({"count": True})


def test_validation_error_is_value_error():
    with pytest.raises(ValueError):
        coerce_params({"count": 0})


def test_unknown_field_rejected():
    with pytest.raises(ValidationError) as info:
        ParameterModel().set("colour", "#ffffff")
    assert info.value.field == "colour"
    with pytest.raises(ValidationError):
        coerce_params({"count": 10, "bogus": 1})


def test_boundaries_accepted():
    p = coerce_params({"count": 1, "randomness": 0, "randomness_power": 1,
                       "branches": 1, "spin": -100.0})
    assert p.count == 1 and p.branches == 1
    assert coerce_params({"count": MAX_COUNT}).count == MAX_COUNT


def test_coerce_revalidates_unvalidated_instances():
    bogus = ParticleFieldParameters.model_construct(count=0)
    with pytest.raises(ValidationError):
        coerce_params(bogus)
    with pytest.raises(TypeError):
        coerce_params(42)


def test_snapshots_are_immutable():
    p = ParticleFieldParameters()
    with pytest.raises(Exception):
        p.count = 5


def test_failed_set_leaves_model_unchanged():
    model = ParameterModel()
    before = model.get()
    with pytest.raises(ValidationError):
        model.set("radius", 0)
    assert model.get() is before
    with pytest.raises(ValidationError):
        model.update(count=10, branches=0)
    assert model.get() is before


def test_set_does_not_notify_commit_does():
    print("Testing commit semantics...")
    model = ParameterModel()
    seen = []
    model.add_commit_listener(seen.append)

    model.set("count", 500)
    model.set("spin", -2.5)
    assert seen == []
    assert model.dirty

    snapshot = model.commit()
    assert seen == [snapshot]
    assert snapshot.count == 500 and snapshot.spin == -2.5
    assert model.committed is snapshot
    assert not model.dirty
    print("  ✓ only commit() notifies listeners")


def test_failed_commit_keeps_committed_and_reverts():
    model = ParameterModel()
    first = model.committed

    def failing(snapshot):
        raise MemoryError("boom")

    model.add_commit_listener(failing)
    model.set("count", 999)
    with pytest.raises(MemoryError):
        model.commit()
    assert model.committed is first
    assert model.get().count == 999

    model.revert()
    assert model.get() is first
    assert not model.dirty

    model.remove_commit_listener(failing)
    model.set("count", 999)
    assert model.commit().count == 999


def test_replace_with_preset():
    model = ParameterModel()
    model.replace(preset_parameters("pinwheel"))
    assert model.get().branches == 2
    assert model.dirty


def test_presets_validate():
    assert set(PRESET_ORDER) <= set(PRESETS)
    for key, name, desc in list_presets():
        p = preset_parameters(key)
        assert isinstance(p, ParticleFieldParameters), key
        assert name and desc
        assert get_preset(key)["name"] == name
    assert get_preset("no_such_preset") is None


def test_slider_defaults_within_ranges():
    defaults = ParticleFieldParameters()
    for sdef in SLIDER_DEFS:
        assert sdef["min"] <= sdef["default"] <= sdef["max"], sdef["key"]
        assert getattr(defaults, sdef["key"]) == sdef["default"], sdef["key"]


if __name__ == "__main__":
    print("\n=== Testing Parameter Model ===\n")

    test_defaults()
    test_set_does_not_notify_commit_does()
    test_failed_commit_keeps_committed_and_reverts()
    test_presets_validate()

    print("\n✓ All tests passed!\n")
