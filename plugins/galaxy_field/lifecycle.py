"""
Galaxy Field Lifecycle Controller

Owns the one active point cloud for a field and replaces it on commit.

Regeneration order:
    1. generate the new buffer (failure leaves the old field untouched)
    2. wrap it in a Points drawable, guarded so it is disposed on any
       later failure
    3. detach + dispose the old drawable
    4. attach the new drawable and store the handle

Only one regeneration may run at a time. A second call while one is in
flight (re-entrant from a listener, or from another thread) is rejected
with StateError rather than queued.
"""

import enum
import logging
import threading
import time
from contextlib import ExitStack

from .drawable import Points, PointsMaterial
from .errors import StateError
from .generator import DEFAULT_CHUNK_SIZE, generate
from .params import ParameterModel, coerce_params
from .sources import make_source


logger = logging.getLogger(__name__)


class FieldState(enum.Enum):
    IDLE = "idle"
    ACTIVE = "active"


class GalaxyField:
    """Regenerate-and-replace controller for one particle field.

    Usage:
        scene = Scene()
        model = ParameterModel()
        field = GalaxyField(scene, model)
        field.regenerate()
        model.add_commit_listener(field.regenerate)
    """

    def __init__(self, scene, model=None, source=None, chunk_size=DEFAULT_CHUNK_SIZE):
        """
        Args:
            scene: Scene graph collaborator (add/remove)
            model: ParameterModel read by regenerate() when no snapshot is given
            source: Uniform random source shared by every regeneration
            chunk_size: Passed through to generate()
        """
        self.scene = scene
        self.model = model if model is not None else ParameterModel()
        self.source = source if source is not None else make_source()
        self.chunk_size = chunk_size
        self._points = None
        self._lock = threading.Lock()
        self.generation = 0
        self.last_duration = 0.0

    @property
    def state(self):
        return FieldState.ACTIVE if self._points is not None else FieldState.IDLE

    @property
    def points(self):
        """The attached Points drawable, or None while idle."""
        return self._points

    @property
    def buffer(self):
        return self._points.geometry if self._points is not None else None

    def regenerate(self, params=None):
        """Build a field from `params` (or the model's snapshot) and swap it in.

        Returns the newly attached Points.

        Raises:
            ValidationError / ResourceExhaustion: from generation; the
                previous field stays attached
            StateError: a regeneration is already running
        """
        if not self._lock.acquire(blocking=False):
            raise StateError("regenerate() called while a regeneration is in progress")
        try:
            return self._regenerate(params if params is not None else self.model.get())
        finally:
            self._lock.release()

    def _regenerate(self, params):
        started = time.perf_counter()
        params = coerce_params(params)
        with ExitStack() as guard:
            buffer = generate(params, self.source, chunk_size=self.chunk_size)
            guard.callback(buffer.dispose)
            points = Points(buffer, PointsMaterial.for_params(params))
            guard.callback(points.dispose)

            old = self._points
            if old is not None:
                self._points = None
                with old:
                    self.scene.remove(old)

            self.scene.add(points)
            self._points = points
            guard.pop_all()

        self.generation += 1
        self.last_duration = time.perf_counter() - started
        logger.debug("field #%d: %d particles in %.1f ms",
                     self.generation, points.count, self.last_duration * 1000)
        return points

    def close(self):
        """Detach and dispose the active field (host shutdown only)."""
        old = self._points
        if old is not None:
            self._points = None
            with old:
                self.scene.remove(old)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
