"""
Drawables and the scene graph they are attached to.

Points pairs a ParticleBuffer with a PointsMaterial. It owns the buffer:
disposing the Points disposes the buffer. Points is also a context
manager, so `with points:` guarantees disposal on the way out.
"""

from dataclasses import dataclass

from .errors import StateError


@dataclass(frozen=True)
class PointsMaterial:
    """Minimal point material description handed to the renderer."""

    size: float = 0.01
    size_attenuation: bool = True
    additive_blending: bool = True
    depth_write: bool = False
    vertex_colors: bool = True

    @classmethod
    def for_params(cls, params):
        return cls(size=params.particle_size)


class Points:
    """A renderable point cloud: geometry buffer + material."""

    def __init__(self, geometry, material):
        self._geometry = geometry
        self.material = material
        self.disposed = False

    @property
    def geometry(self):
        if self.disposed:
            raise StateError("points have been disposed")
        return self._geometry

    @property
    def count(self):
        return self._geometry.count

    def dispose(self):
        if not self.disposed:
            self._geometry.dispose()
            self.disposed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.dispose()
        return False

    def __repr__(self):
        state = "disposed" if self.disposed else "live"
        return f"Points(count={self.count:,}, size={self.material.size}, {state})"


class Scene:
    """Flat scene graph: an ordered set of attached drawables."""

    def __init__(self):
        self.children = []

    def add(self, obj):
        if getattr(obj, "disposed", False):
            raise StateError("cannot attach a disposed drawable")
        if obj in self.children:
            raise StateError("drawable is already attached")
        self.children.append(obj)

    def remove(self, obj):
        if obj in self.children:
            self.children.remove(obj)

    def points(self):
        """Attached Points objects, in attach order."""
        return [c for c in self.children if isinstance(c, Points)]

    def __contains__(self, obj):
        return obj in self.children

    def __iter__(self):
        return iter(list(self.children))

    def __len__(self):
        return len(self.children)
