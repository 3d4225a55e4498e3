"""Deterministic vector helpers operating on plain ``(x, y, z)`` tuples.

Ringfield works on the ground plane, so most helpers here ignore the ``y``
component and measure distances across ``x``/``z`` only.
"""
from __future__ import annotations

import math
from typing import Iterable, Tuple

Vector3 = Tuple[float, float, float]
Vector2 = Tuple[float, float]


# //1.- Convert iterables into normalized three-component tuples for safety.
def _to_vector(components: Iterable[float]) -> Vector3:
    values = tuple(float(component) for component in components)
    if len(values) != 3:
        raise ValueError("Vector3 requires exactly three components")
    return values  # type: ignore[return-value]


# //2.- Add vectors component-wise returning a new tuple.
def add(a: Iterable[float], b: Iterable[float]) -> Vector3:
    ax, ay, az = _to_vector(a)
    bx, by, bz = _to_vector(b)
    return (ax + bx, ay + by, az + bz)


# //3.- Subtract vectors component-wise returning a new tuple.
def subtract(a: Iterable[float], b: Iterable[float]) -> Vector3:
    ax, ay, az = _to_vector(a)
    bx, by, bz = _to_vector(b)
    return (ax - bx, ay - by, az - bz)


# //4.- Multiply a vector by a scalar value.
def scale(vector: Iterable[float], scalar: float) -> Vector3:
    vx, vy, vz = _to_vector(vector)
    factor = float(scalar)
    return (vx * factor, vy * factor, vz * factor)


# //5.- Linearly interpolate between two vectors using parameter t.
def lerp(a: Iterable[float], b: Iterable[float], t: float) -> Vector3:
    ax, ay, az = _to_vector(a)
    bx, by, bz = _to_vector(b)
    factor = float(t)
    return (ax + (bx - ax) * factor, ay + (by - ay) * factor, az + (bz - az) * factor)


# //6.- Horizontal distance between two points, ignoring elevation.
def planar_distance(a: Iterable[float], b: Iterable[float]) -> float:
    ax, _, az = _to_vector(a)
    bx, _, bz = _to_vector(b)
    return math.hypot(ax - bx, az - bz)


# //7.- Horizontal distance of a point from an arbitrary planar center.
def planar_length(vector: Iterable[float]) -> float:
    vx, _, vz = _to_vector(vector)
    return math.hypot(vx, vz)


# //8.- Unit direction from a to b on the ground plane with a safe fallback.
def planar_direction(a: Iterable[float], b: Iterable[float], fallback: Vector3 = (1.0, 0.0, 0.0)) -> Vector3:
    ax, _, az = _to_vector(a)
    bx, _, bz = _to_vector(b)
    dx = bx - ax
    dz = bz - az
    magnitude = math.hypot(dx, dz)
    if magnitude == 0:
        return fallback
    return (dx / magnitude, 0.0, dz / magnitude)


# //9.- Rotate a planar direction by ninety degrees to obtain its sideways axis.
def perpendicular(direction: Iterable[float]) -> Vector3:
    dx, _, dz = _to_vector(direction)
    return (-dz, 0.0, dx)


# //10.- Offset a point along the ground plane by polar coordinates.
def polar_offset(origin: Iterable[float], angle: float, distance: float) -> Vector3:
    ox, oy, oz = _to_vector(origin)
    return (ox + math.cos(angle) * distance, oy, oz + math.sin(angle) * distance)


# //11.- Shortest horizontal distance from a point to the segment [start, end].
def point_segment_distance(point: Iterable[float], start: Iterable[float], end: Iterable[float]) -> float:
    px, _, pz = _to_vector(point)
    sx, _, sz = _to_vector(start)
    ex, _, ez = _to_vector(end)
    seg_x = ex - sx
    seg_z = ez - sz
    denom = seg_x * seg_x + seg_z * seg_z
    if denom == 0:
        return math.hypot(px - sx, pz - sz)
    t = ((px - sx) * seg_x + (pz - sz) * seg_z) / denom
    t = max(0.0, min(1.0, t))
    return math.hypot(px - (sx + seg_x * t), pz - (sz + seg_z * t))
