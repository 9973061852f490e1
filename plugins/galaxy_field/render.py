"""
Headless Point Renderer

Projects every Points drawable in a Scene through an orbiting perspective
camera and splats it into a float RGB accumulator. Additive materials are
bilinearly splatted and summed (order independent, matching depth_write
off); opaque ones are painted far-to-near. A downsampled gaussian glow is
added on top before conversion to 8-bit.

No pygame dependency: the viewer blits the result, the CLI saves it.
"""

import math
from dataclasses import dataclass

import numpy as np
from scipy.ndimage import gaussian_filter, zoom


@dataclass
class Camera:
    """Perspective camera orbiting the origin.

    Defaults put the eye at (3, 3, 3) looking at the center, 75 deg FOV.
    """

    azimuth: float = math.radians(45.0)
    elevation: float = math.atan2(3.0, math.hypot(3.0, 3.0))
    distance: float = math.sqrt(27.0)
    fov: float = 75.0
    near: float = 0.1
    far: float = 100.0

    def position(self):
        ce = math.cos(self.elevation)
        return np.array([
            self.distance * ce * math.cos(self.azimuth),
            self.distance * math.sin(self.elevation),
            self.distance * ce * math.sin(self.azimuth),
        ])

    def basis(self):
        """Return (eye, right, up, forward) unit vectors."""
        eye = self.position()
        forward = -eye / np.linalg.norm(eye)
        right = np.cross(forward, np.array([0.0, 1.0, 0.0]))
        norm = np.linalg.norm(right)
        if norm < 1e-9:
            # Looking straight down the y axis
            right = np.array([1.0, 0.0, 0.0])
        else:
            right /= norm
        up = np.cross(right, forward)
        return eye, right, up, forward

    def orbit(self, d_azimuth):
        self.azimuth = (self.azimuth + d_azimuth) % (2.0 * math.pi)


def project(vertices, camera, width, height):
    """Project (n, 3) scene points to pixel coordinates.

    Returns:
        (px, py, depth, visible) arrays of length n. px/py are float pixel
        coordinates, depth is distance along the view axis.
    """
    eye, right, up, forward = camera.basis()
    rel = np.asarray(vertices, dtype=np.float64) - eye
    xc = rel @ right
    yc = rel @ up
    depth = rel @ forward
    visible = (depth > camera.near) & (depth < camera.far)
    safe = np.where(visible, depth, 1.0)
    focal = (height / 2.0) / math.tan(math.radians(camera.fov) / 2.0)
    px = width / 2.0 + xc * focal / safe
    py = height / 2.0 - yc * focal / safe
    return px, py, depth, visible


def _point_pixels(material, depth, height):
    """On-screen point diameter in pixels."""
    if material.size_attenuation:
        return material.size * (height / 2.0) / depth
    return np.full(depth.shape, float(material.size))


def _splat_additive(accum, px, py, rgb, weight):
    """Bilinear scatter-add of rgb * weight into accum (H, W, 3)."""
    h, w = accum.shape[:2]
    x0 = np.floor(px).astype(np.int64)
    y0 = np.floor(py).astype(np.int64)
    fx = px - x0
    fy = py - y0
    flat = accum.reshape(-1, 3)
    for dy in range(2):
        wy = fy if dy else (1.0 - fy)
        for dx in range(2):
            wx = fx if dx else (1.0 - fx)
            xi = x0 + dx
            yi = y0 + dy
            valid = (xi >= 0) & (xi < w) & (yi >= 0) & (yi < h)
            if not np.any(valid):
                continue
            idx = yi[valid] * w + xi[valid]
            k = (wx * wy * weight)[valid]
            for c in range(3):
                flat[:, c] += np.bincount(idx, weights=rgb[valid, c] * k, minlength=h * w)


def _splat_opaque(accum, px, py, depth, rgb):
    """Nearest-pixel painter's splat, far points first."""
    h, w = accum.shape[:2]
    xi = np.round(px).astype(np.int64)
    yi = np.round(py).astype(np.int64)
    valid = (xi >= 0) & (xi < w) & (yi >= 0) & (yi < h)
    order = np.argsort(-depth[valid], kind="stable")
    accum[yi[valid][order], xi[valid][order]] = rgb[valid][order]


def splat_points(accum, points, camera):
    """Draw one Points drawable into the float accumulator."""
    buffer = points.geometry
    if buffer.count == 0:
        return
    h, w = accum.shape[:2]
    px, py, depth, visible = project(buffer.vertices(), camera, w, h)
    if not np.any(visible):
        return
    px, py, depth = px[visible], py[visible], depth[visible]
    material = points.material
    if material.vertex_colors:
        rgb = buffer.rgb()[visible].astype(np.float64)
    else:
        rgb = np.ones((px.size, 3))

    if material.additive_blending:
        size_px = _point_pixels(material, depth, h)
        # Coverage ~ area of the point sprite, capped so near points don't blow out
        weight = np.clip(size_px * size_px, 0.0, 4.0)
        _splat_additive(accum, px, py, rgb, weight)
    else:
        _splat_opaque(accum, px, py, depth, rgb)


def apply_bloom(image, intensity=0.4, factor=8, sigma=3.5):
    """Soft glow: downsample -> gaussian -> bilinear upsample -> add."""
    if intensity <= 0:
        return image
    h, w = image.shape[:2]
    small = image[::factor, ::factor, :]
    glow = gaussian_filter(small, [sigma, sigma, 0])
    glow = zoom(glow, (h / glow.shape[0], w / glow.shape[1], 1), order=1)[:h, :w, :]
    out = image.copy()
    gh, gw = glow.shape[:2]
    out[:gh, :gw, :] += glow * intensity
    return out


def render_scene(scene, camera, width, height, bloom=0.4, exposure=1.0,
                 background=(0.0, 0.0, 0.0)):
    """Render every Points in the scene.

    Returns:
        (height, width, 3) uint8 RGB image.
    """
    accum = np.zeros((height, width, 3), dtype=np.float64)
    for points in scene.points():
        splat_points(accum, points, camera)
    if exposure != 1.0:
        accum *= exposure
    accum = apply_bloom(accum, intensity=bloom)
    accum += np.asarray(background, dtype=np.float64)
    np.clip(accum, 0.0, 1.0, out=accum)
    return (accum * 255.0 + 0.5).astype(np.uint8)
