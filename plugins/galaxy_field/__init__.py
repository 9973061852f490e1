"""
Procedural spiral galaxy particle fields.

    from galaxy_field import ParameterModel, GalaxyField, Scene
    scene = Scene()
    model = ParameterModel()
    field = GalaxyField(scene, model)
    field.regenerate()
    model.add_commit_listener(field.regenerate)
"""

from .drawable import Points, PointsMaterial, Scene
from .errors import GalaxyFieldError, ResourceExhaustion, StateError, ValidationError
from .generator import ParticleBuffer, generate
from .lifecycle import FieldState, GalaxyField
from .params import MAX_COUNT, ParameterModel, ParticleFieldParameters
from .sources import SequenceSource, make_source

__all__ = [
    "FieldState",
    "GalaxyField",
    "GalaxyFieldError",
    "MAX_COUNT",
    "ParameterModel",
    "ParticleBuffer",
    "ParticleFieldParameters",
    "Points",
    "PointsMaterial",
    "ResourceExhaustion",
    "Scene",
    "SequenceSource",
    "StateError",
    "ValidationError",
    "generate",
    "make_source",
]
