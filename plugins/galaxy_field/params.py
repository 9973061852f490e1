"""
Galaxy Parameter Model

ParticleFieldParameters is the immutable snapshot the generator reads.
ParameterModel is the editable bag the control panel writes to: live edits
go through set(), and only commit() notifies listeners (which is what
triggers regeneration).

Legal ranges are enforced here and never clamped. The narrower slider
ranges in SLIDER_DEFS are a UI concern only.
"""

from collections.abc import Mapping
from typing import Tuple

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .colors import parse_color
from .errors import ValidationError


MAX_COUNT = 1_000_000

RGB = Tuple[float, float, float]


class ParticleFieldParameters(BaseModel):
    """One parameter snapshot for a spiral particle field."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        allow_inf_nan=False,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    count: int = Field(default=100_000, ge=1, le=MAX_COUNT,
                       description="Number of particles")
    particle_size: float = Field(default=0.01, gt=0,
                                 description="Point size in scene units")
    radius: float = Field(default=5.0, gt=0,
                          description="Outer extent of the field")
    branches: int = Field(default=3, ge=1,
                          description="Number of spiral arms")
    spin: float = Field(default=1.0,
                        description="Radians of twist per unit radius")
    randomness: float = Field(default=0.2, ge=0,
                              description="Scatter magnitude scale")
    randomness_power: float = Field(default=3.0, ge=1,
                                    description="Scatter concentration exponent")
    inside_color: RGB = Field(default="#ff6030", validate_default=True)
    outside_color: RGB = Field(default="#1b3984", validate_default=True)

    @field_validator("inside_color", "outside_color", mode="before")
    @classmethod
    def _parse_color(cls, value):
        return parse_color(value)

    @field_validator("count", "particle_size", "radius", "branches", "spin",
                     "randomness", "randomness_power", mode="before")
    @classmethod
    def _reject_bool(cls, value):
        # bool is an int subclass; lax mode would read True as 1
        if isinstance(value, bool):
            raise ValueError("expected a number, got a boolean")
        return value


# camelCase aliases: particleSize, randomnessPower, insideColor, outsideColor
_FIELD_BY_ALIAS = {
    info.alias: name
    for name, info in ParticleFieldParameters.model_fields.items()
    if info.alias and info.alias != name
}


def resolve_field(name):
    """Map a snake_case or camelCase parameter name to the model field."""
    if name in ParticleFieldParameters.model_fields:
        return name
    if name in _FIELD_BY_ALIAS:
        return _FIELD_BY_ALIAS[name]
    raise ValidationError(name, None, "unknown parameter")


def _validate(data):
    try:
        return ParticleFieldParameters.model_validate(data)
    except pydantic.ValidationError as exc:
        err = exc.errors()[0]
        loc = err["loc"][0] if err["loc"] else "parameters"
        field = _FIELD_BY_ALIAS.get(loc, loc)
        raise ValidationError(field, err.get("input"), err["msg"]) from exc


def coerce_params(params):
    """Return a validated snapshot from a model instance or a mapping.

    Model instances are re-validated too, so one built with
    model_construct() (which skips validation) is still rejected.
    """
    if isinstance(params, ParticleFieldParameters):
        return _validate(params.model_dump())
    if isinstance(params, Mapping):
        return _validate(dict(params))
    raise TypeError(f"expected ParticleFieldParameters or a mapping, got {type(params).__name__}")


# Slider ranges from the debug panel (count 100..1M, branches 2..20, ...)
SLIDER_DEFS = [
    {"key": "count", "label": "Count", "section": "SHAPE",
     "min": 100, "max": MAX_COUNT, "default": 100_000, "fmt": ",.0f", "step": 100},
    {"key": "particle_size", "label": "Size", "section": "SHAPE",
     "min": 0.001, "max": 0.1, "default": 0.01, "fmt": ".3f", "step": 0.001},
    {"key": "radius", "label": "Radius", "section": "SHAPE",
     "min": 0.01, "max": 20.0, "default": 5.0, "fmt": ".2f", "step": 0.01},
    {"key": "branches", "label": "Branches", "section": "SHAPE",
     "min": 2, "max": 20, "default": 3, "fmt": ".0f", "step": 1},
    {"key": "spin", "label": "Spin", "section": "SHAPE",
     "min": -5.0, "max": 5.0, "default": 1.0, "fmt": ".3f", "step": 0.001},
    {"key": "randomness", "label": "Randomness", "section": "SCATTER",
     "min": 0.0, "max": 2.0, "default": 0.2, "fmt": ".3f", "step": 0.001},
    {"key": "randomness_power", "label": "Power", "section": "SCATTER",
     "min": 1.0, "max": 10.0, "default": 3.0, "fmt": ".3f", "step": 0.001},
]

INTEGER_FIELDS = ("count", "branches")


class ParameterModel:
    """Editable parameter bag with commit/revert semantics.

    set() and update() validate and store immediately but notify nobody.
    commit() hands the current snapshot to every commit listener; the
    snapshot only becomes the committed one if they all succeed.
    """

    def __init__(self, initial=None):
        if initial is None:
            initial = ParticleFieldParameters()
        self._current = coerce_params(initial)
        self._committed = self._current
        self._listeners = []

    def get(self):
        """Return the current snapshot."""
        return self._current

    @property
    def committed(self):
        """The last snapshot that was committed successfully."""
        return self._committed

    @property
    def dirty(self):
        return self._current != self._committed

    def set(self, field, value):
        """Validate and store one field. Returns the new snapshot.

        Raises ValidationError (model unchanged) if the value is illegal.
        """
        name = resolve_field(field)
        data = self._current.model_dump()
        data[name] = value
        self._current = _validate(data)
        return self._current

    def update(self, **changes):
        """Set several fields at once; all or nothing."""
        data = self._current.model_dump()
        for key, value in changes.items():
            data[resolve_field(key)] = value
        self._current = _validate(data)
        return self._current

    def replace(self, params):
        """Swap in a whole snapshot (e.g. a preset) without committing."""
        self._current = coerce_params(params)
        return self._current

    def add_commit_listener(self, callback):
        self._listeners.append(callback)

    def remove_commit_listener(self, callback):
        self._listeners.remove(callback)

    def commit(self):
        """Notify listeners with the current snapshot.

        Errors raised by a listener propagate unchanged and leave the
        committed snapshot where it was, so the caller can revert().
        """
        snapshot = self._current
        for callback in list(self._listeners):
            callback(snapshot)
        self._committed = snapshot
        return snapshot

    def revert(self):
        """Discard uncommitted edits."""
        self._current = self._committed
        return self._current
