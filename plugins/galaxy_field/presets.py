"""
Galaxy Parameter Presets

Each preset is a set of field parameters known to produce a good-looking
galaxy, plus a display name and description. "classic" carries the
default values of the debug panel.
"""

from .params import ParticleFieldParameters

_META_KEYS = ("name", "description")

PRESETS = {
    "classic": {
        "name": "Classic",
        "description": "Three gently twisted arms, warm core, blue rim",
        "count": 100_000, "particle_size": 0.01, "radius": 5.0,
        "branches": 3, "spin": 1.0,
        "randomness": 0.2, "randomness_power": 3.0,
        "inside_color": "#ff6030", "outside_color": "#1b3984",
    },
    "milky_way": {
        "name": "Milky Way",
        "description": "Four tight arms with a dense golden bulge",
        "count": 200_000, "particle_size": 0.008, "radius": 6.0,
        "branches": 4, "spin": 1.4,
        "randomness": 0.25, "randomness_power": 4.0,
        "inside_color": "#ffd27a", "outside_color": "#3050c8",
    },
    "pinwheel": {
        "name": "Pinwheel",
        "description": "Two long sweeping arms twisting the other way",
        "count": 150_000, "particle_size": 0.01, "radius": 8.0,
        "branches": 2, "spin": -0.8,
        "randomness": 0.3, "randomness_power": 3.5,
        "inside_color": "#ffffff", "outside_color": "#5a2d9c",
    },
    "starburst": {
        "name": "Starburst",
        "description": "Many straight spokes, no twist",
        "count": 120_000, "particle_size": 0.012, "radius": 5.0,
        "branches": 12, "spin": 0.0,
        "randomness": 0.15, "randomness_power": 5.0,
        "inside_color": "#fff2a8", "outside_color": "#ff2a6d",
    },
    "nebula": {
        "name": "Nebula",
        "description": "Loose, heavily scattered cloud",
        "count": 300_000, "particle_size": 0.006, "radius": 5.0,
        "branches": 5, "spin": 2.5,
        "randomness": 1.2, "randomness_power": 1.5,
        "inside_color": "#ff7ad9", "outside_color": "#0f6b8c",
    },
    "vortex": {
        "name": "Vortex",
        "description": "Tightly wound arms on a thin disk",
        "count": 250_000, "particle_size": 0.007, "radius": 4.0,
        "branches": 6, "spin": 4.5,
        "randomness": 0.1, "randomness_power": 8.0,
        "inside_color": "#7af7ff", "outside_color": "#1a0f5c",
    },
}

# Order shown in UI; number keys 1-9 map here
PRESET_ORDER = ["classic", "milky_way", "pinwheel", "starburst", "nebula", "vortex"]

DEFAULT_PRESET = "classic"


def get_preset(name):
    """Get a preset by name. Returns None if not found."""
    return PRESETS.get(name)


def preset_parameters(name):
    """Validated ParticleFieldParameters for a preset. KeyError if unknown."""
    preset = PRESETS[name]
    return ParticleFieldParameters(**{k: v for k, v in preset.items() if k not in _META_KEYS})


def list_presets():
    """Return list of (key, name, description) in UI order."""
    return [(k, PRESETS[k]["name"], PRESETS[k]["description"])
            for k in PRESET_ORDER if k in PRESETS]
