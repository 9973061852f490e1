"""
Galaxy Generator - Entry Point

Usage:
    python -m galaxy_field [preset] [--count N] [--seed N] [--set key=value]
                           [--window WxH] [--snap [PATH]] [--verbose]

Examples:
    python -m galaxy_field
    python -m galaxy_field pinwheel
    python -m galaxy_field --count 500000 --set spin=-2 --set branches=5
    python -m galaxy_field nebula --seed 7 --snap
    python -m galaxy_field milky_way --snap out.png --window 1600x1200

--snap renders one frame headless (no window) and saves it as PNG.
Use --list to see all available presets.
"""

import logging
import os
import sys

from .errors import GalaxyFieldError
from .params import resolve_field
from .presets import DEFAULT_PRESET, PRESET_ORDER, list_presets


def parse_override(text):
    """'spin=-2' -> ('spin', '-2'). Values are left for pydantic to coerce."""
    if "=" not in text:
        raise ValueError(f"expected key=value, got {text!r}")
    key, value = text.split("=", 1)
    key = resolve_field(key.strip())
    value = value.strip()
    if key in ("inside_color", "outside_color") and not value.startswith("#"):
        value = tuple(float(v) for v in value.split(","))
    return key, value


def snap(preset, overrides, seed, width, height, path=None):
    """Headless mode: generate once, render, save PNG, exit."""
    from PIL import Image

    from .drawable import Scene
    from .lifecycle import GalaxyField
    from .params import ParameterModel
    from .presets import preset_parameters
    from .render import Camera, render_scene
    from .sources import make_source

    model = ParameterModel(preset_parameters(preset))
    if overrides:
        model.update(**overrides)

    if path is None:
        screenshots_dir = os.path.join(
            os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
            "screenshots"
        )
        os.makedirs(screenshots_dir, exist_ok=True)
        path = os.path.join(screenshots_dir, f"galaxy_{preset}.png")

    scene = Scene()
    with GalaxyField(scene, model, source=make_source(seed)) as field:
        print(f"  {preset}: generating {model.get().count:,} particles...", end="", flush=True)
        field.regenerate()
        rgb = render_scene(scene, Camera(), width, height)
    Image.fromarray(rgb).save(path)
    print(f" saved: {path}")
    return path


def main(argv=None):
    preset = DEFAULT_PRESET
    win_w, win_h = 900, 900
    seed = None
    overrides = {}
    snap_mode = False
    snap_path = None

    args = sys.argv[1:] if argv is None else list(argv)
    i = 0
    try:
        while i < len(args):
            arg = args[i]
            if arg == "--count" and i + 1 < len(args):
                overrides["count"] = int(args[i + 1])
                i += 2
            elif arg == "--seed" and i + 1 < len(args):
                seed = int(args[i + 1])
                i += 2
            elif arg == "--set" and i + 1 < len(args):
                key, value = parse_override(args[i + 1])
                overrides[key] = value
                i += 2
            elif arg == "--window" and i + 1 < len(args):
                parts = args[i + 1].lower().split("x")
                if len(parts) != 2:
                    raise ValueError(f"expected --window WxH, got {args[i + 1]!r}")
                win_w, win_h = int(parts[0]), int(parts[1])
                if win_w < 1 or win_h < 1:
                    raise ValueError(f"window size must be positive, got {args[i + 1]!r}")
                i += 2
            elif arg == "--snap":
                snap_mode = True
                if i + 1 < len(args) and args[i + 1].endswith(".png"):
                    snap_path = args[i + 1]
                    i += 1
                i += 1
            elif arg in ("--verbose", "-v"):
                logging.basicConfig(level=logging.DEBUG,
                                    format="%(asctime)s %(name)s %(levelname)s %(message)s")
                i += 1
            elif arg == "--list":
                print("\nAvailable presets:")
                for key, name, desc in list_presets():
                    print(f"    {key:12s} {name:12s} {desc}")
                print()
                return 0
            elif arg in ("--help", "-h"):
                print(__doc__)
                return 0
            elif arg in PRESET_ORDER:
                preset = arg
                i += 1
            else:
                print(f"Unknown argument: {arg}")
                print("Use --list to see available presets")
                return 2
    except (ValueError, GalaxyFieldError) as e:
        print(f"Invalid argument: {e}")
        return 2

    try:
        if snap_mode:
            print(f"Headless snap mode: {preset} @ {win_w}x{win_h}")
            snap(preset, overrides, seed, win_w, win_h, snap_path)
            return 0

        from .viewer import Viewer

        print("Starting Galaxy Viewer")
        print(f"  Preset: {preset}")
        if overrides:
            print(f"  Overrides: {overrides}")
        print(f"  Window: {win_w}x{win_h}")
        print()

        viewer = Viewer(width=win_w, height=win_h, start_preset=preset,
                        seed=seed, overrides=overrides)
    except GalaxyFieldError as e:
        print(f"Error: {e}")
        return 1
    viewer.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
