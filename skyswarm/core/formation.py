import math

import numpy as np

from .state import FormationType


def generate_formation(center, count: int, kind: FormationType, spacing: float = 80.0) -> list[np.ndarray]:
    """
    Slot positions for `count` agents laid out around `center`.

    line:   evenly spaced along the x axis.
    grid:   ceil(sqrt(n)) columns, rows as needed, filled row by row.
    circle: radius chosen so neighboring slots sit ~`spacing` apart along
            the arc, first slot at the top (-90 deg).
    """
    cx, cy = float(center[0]), float(center[1])
    positions = []
    if count <= 0:
        return positions

    kind = FormationType(kind)
    if kind is FormationType.LINE:
        for i in range(count):
            positions.append(np.array([cx + (i - (count - 1) / 2) * spacing, cy]))
    elif kind is FormationType.GRID:
        cols = math.ceil(math.sqrt(count))
        rows = math.ceil(count / cols)
        for r in range(rows):
            for c in range(cols):
                if len(positions) == count:
                    break
                positions.append(
                    np.array([
                        cx + (c - (cols - 1) / 2) * spacing,
                        cy + (r - (rows - 1) / 2) * spacing,
                    ])
                )
    elif kind is FormationType.CIRCLE:
        radius = spacing * count / (2 * math.pi)
        for i in range(count):
            angle = 2 * math.pi * i / count - math.pi / 2
            positions.append(np.array([cx + radius * math.cos(angle), cy + radius * math.sin(angle)]))
    else:
        raise ValueError(f"unknown formation: {kind}")
    return positions
