#!/usr/bin/env python3
"""
Tests for the regenerate-and-replace lifecycle.

Verifies:
1. Idle -> Active on first regenerate, one drawable at a time after that
2. Old buffers are disposed when superseded
3. Failed generation keeps the previous field attached and intact
4. Re-entrant regenerate() is rejected with StateError
5. Commit-driven regeneration through the parameter model
"""

import pytest

from galaxy_field.drawable import Points, PointsMaterial, Scene
from galaxy_field.errors import ResourceExhaustion, StateError, ValidationError
from galaxy_field.lifecycle import FieldState, GalaxyField
from galaxy_field.params import ParameterModel, ParticleFieldParameters
from galaxy_field.sources import make_source


class FlakySource:
    """Delegates to a real source until `fail` is set, then raises MemoryError."""

    def __init__(self, seed=0):
        self.inner = make_source(seed)
        self.fail = False

    def random(self, size=None):
        if self.fail:
            raise MemoryError("simulated allocation failure")
        return self.inner.random(size)


class ReentrantSource:
    """Calls back into the field mid-generation and records the outcome."""

    def __init__(self):
        self.inner = make_source(1)
        self.field = None
        self.errors = []

    def random(self, size=None):
        try:
            self.field.regenerate()
        except StateError as e:
            self.errors.append(e)
        return self.inner.random(size)


class RejectingScene(Scene):
    def __init__(self):
        super().__init__()
        self.rejected = []

    def add(self, obj):
        self.rejected.append(obj)
        raise RuntimeError("scene is locked")


def _model(count=500, **kw):
    return ParameterModel(ParticleFieldParameters(count=count, **kw))


def test_idle_to_active():
    print("Testing Idle -> Active...")
    scene = Scene()
    field = GalaxyField(scene, _model(), source=make_source(0))
    assert field.state is FieldState.IDLE
    assert field.points is None and field.buffer is None
    assert len(scene) == 0

    points = field.regenerate()
    assert field.state is FieldState.ACTIVE
    assert field.points is points
    assert scene.points() == [points]
    assert field.buffer.count == 500
    assert field.generation == 1
    assert field.last_duration >= 0.0
    print("  ✓ first regenerate attaches one drawable")


def test_regenerate_replaces_and_disposes():
    print("Testing Active -> Active...")
    scene = Scene()
    model = _model(count=300)
    field = GalaxyField(scene, model, source=make_source(0))
    first = field.regenerate()
    first_buffer = first.geometry

    model.set("count", 1200)
    second = field.regenerate()

    assert second is not first
    assert field.buffer.count == 1200
    assert scene.points() == [second]
    assert len(scene) == 1
    assert first.disposed
    assert first_buffer.disposed
    with pytest.raises(StateError):
        first.geometry
    assert field.generation == 2
    print("  ✓ old field disposed, only the new one attached")


def test_explicit_params_override_model():
    field = GalaxyField(Scene(), _model(count=100), source=make_source(0))
    field.regenerate({"count": 42, "branches": 7})
    assert field.buffer.count == 42
    assert field.model.get().count == 100


def test_validation_failure_keeps_old_field():
    scene = Scene()
    field = GalaxyField(scene, _model(), source=make_source(0))
    old = field.regenerate()

    with pytest.raises(ValidationError):
        field.regenerate({"count": 0})

    assert field.points is old
    assert not old.disposed
    assert scene.points() == [old]
    assert field.generation == 1


def test_resource_exhaustion_keeps_old_field():
    scene = Scene()
    source = FlakySource()
    field = GalaxyField(scene, _model(), source=source)
    old = field.regenerate()
    positions = old.geometry.positions.copy()

    source.fail = True
    with pytest.raises(ResourceExhaustion):
        field.regenerate()

    assert field.points is old
    assert scene.points() == [old]
    assert (old.geometry.positions == positions).all()
    assert field.state is FieldState.ACTIVE


def test_reentrant_regenerate_rejected():
    scene = Scene()
    source = ReentrantSource()
    field = GalaxyField(scene, _model(count=50), source=source)
    source.field = field

    field.regenerate()

    assert len(source.errors) == 1
    assert field.generation == 1
    assert len(scene) == 1


def test_attach_failure_disposes_new_drawable():
    scene = RejectingScene()
    field = GalaxyField(scene, _model(), source=make_source(0))
    with pytest.raises(RuntimeError):
        field.regenerate()
    assert field.state is FieldState.IDLE
    assert len(scene.rejected) == 1
    assert scene.rejected[0].disposed


def test_commit_drives_regeneration():
    print("Testing commit-driven regeneration...")
    scene = Scene()
    model = _model(count=200)
    field = GalaxyField(scene, model, source=make_source(0))
    model.add_commit_listener(field.regenerate)
    model.commit()
    assert field.generation == 1

    # Live edits only
    model.set("count", 250)
    model.set("count", 260)
    assert field.generation == 1
    assert field.buffer.count == 200

    model.commit()
    assert field.generation == 2
    assert field.buffer.count == 260
    assert len(scene) == 1
    print("  ✓ set() is live, commit() regenerates")


def test_failed_commit_can_be_reverted():
    scene = Scene()
    source = FlakySource()
    model = _model(count=200)
    field = GalaxyField(scene, model, source=source)
    model.add_commit_listener(field.regenerate)
    model.commit()
    shown = field.points

    model.set("count", 400)
    source.fail = True
    with pytest.raises(ResourceExhaustion):
        model.commit()
    model.revert()

    assert model.get().count == 200
    assert field.points is shown
    assert field.buffer.count == 200


def test_material_follows_params():
    field = GalaxyField(Scene(), _model(particle_size=0.05), source=make_source(0))
    material = field.regenerate().material
    assert material == PointsMaterial(size=0.05)
    assert material.size_attenuation
    assert material.additive_blending
    assert not material.depth_write
    assert material.vertex_colors


def test_close_disposes_active_field():
    scene = Scene()
    with GalaxyField(scene, _model(), source=make_source(0)) as field:
        points = field.regenerate()
    assert points.disposed
    assert field.state is FieldState.IDLE
    assert len(scene) == 0


def test_scene_rejects_duplicates_and_disposed():
    scene = Scene()
    field = GalaxyField(Scene(), _model(count=10), source=make_source(0))
    points = field.regenerate()
    other = Points(points.geometry, points.material)
    scene.add(other)
    with pytest.raises(StateError):
        scene.add(other)
    other.dispose()
    scene.remove(other)
    with pytest.raises(StateError):
        scene.add(other)


if __name__ == "__main__":
    print("\n=== Testing Field Lifecycle ===\n")

    test_idle_to_active()
    test_regenerate_replaces_and_disposes()
    test_commit_drives_regeneration()

    print("\n✓ All tests passed!\n")
