import math

import numpy as np


def distance(a, b) -> float:
    return float(np.hypot(a[0] - b[0], a[1] - b[1]))


def normalize(v) -> np.ndarray:
    """
    Unit vector along v. A zero-length vector normalizes to zero.
    """
    v = np.asarray(v, dtype=float)
    n = float(np.linalg.norm(v))
    if n == 0.0:
        return np.zeros_like(v)
    return v / n


def clamp_speed(v, max_speed: float) -> np.ndarray:
    speed = float(np.linalg.norm(v))
    if speed > max_speed:
        return v / speed * max_speed
    return np.asarray(v, dtype=float)


def heading_deg(v) -> float:
    return math.degrees(math.atan2(v[1], v[0]))


def segment_intersects_circle(p1, p2, center, radius: float) -> bool:
    """
    True if the segment p1->p2 crosses the boundary of the circle.

    Solves |p1 + t*(p2 - p1) - center| = radius for t and accepts a root
    in [0, 1]. A segment lying entirely inside the circle never touches
    the boundary and does not count.
    """
    dx = p2[0] - p1[0]
    dy = p2[1] - p1[1]
    fx = p1[0] - center[0]
    fy = p1[1] - center[1]

    a = dx * dx + dy * dy
    if a == 0.0:
        return False
    b = 2.0 * (fx * dx + fy * dy)
    c = fx * fx + fy * fy - radius * radius

    disc = b * b - 4.0 * a * c
    if disc < 0:
        return False
    root = math.sqrt(disc)
    t1 = (-b - root) / (2.0 * a)
    t2 = (-b + root) / (2.0 * a)
    return 0.0 <= t1 <= 1.0 or 0.0 <= t2 <= 1.0


def clamp_to_bounds(pos, bounds, margin: float = 0.0) -> np.ndarray:
    xmin, xmax, ymin, ymax = bounds
    return np.array(
        [
            min(max(pos[0], xmin + margin), xmax - margin),
            min(max(pos[1], ymin + margin), ymax - margin),
        ],
        dtype=float,
    )
