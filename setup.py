"""
Custom setup.py to exclude pygame-dependent files from the wheel.

viewer.py and controls.py require pygame, which headless installs
(snapshot rendering, embedding the generator elsewhere) do not need.
__main__.py stays in: it only imports the viewer when a window is
requested, so `python -m galaxy_field --snap` works without pygame.
Install the "viewer" extra to get the interactive window.
"""

from setuptools import setup
from setuptools.command.build_py import build_py as _build_py


# Modules that require pygame and should not be packaged in the wheel
_EXCLUDE_MODULES = {"viewer", "controls"}


class BuildPy(_build_py):
    """Custom build_py that excludes pygame-dependent modules."""

    def find_package_modules(self, package, package_dir):
        modules = super().find_package_modules(package, package_dir)
        return [
            (pkg, mod, path)
            for (pkg, mod, path) in modules
            if mod not in _EXCLUDE_MODULES
        ]


setup(
    cmdclass={"build_py": BuildPy},
)
