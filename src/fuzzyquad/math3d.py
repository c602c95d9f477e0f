"""
Rotation helpers for quaternions and Euler angles.

Quaternion convention: [w, x, y, z] (scalar-first, Hamilton convention).
Rotation convention: R rotates vectors from body to world frame.
Euler angles are [roll, pitch, yaw] in the ZYX (yaw-pitch-roll) sequence.
"""

import numpy as np
from numpy.typing import NDArray


IDENTITY_QUAT = np.array([1.0, 0.0, 0.0, 0.0])


def quat_normalize(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Normalize a quaternion to unit length.

    A degenerate (near-zero) input collapses to the identity rotation.
    """
    norm = np.linalg.norm(q)
    if norm < 1e-10:
        return IDENTITY_QUAT.copy()
    return q / norm


def quat_mul(q1: NDArray[np.float64], q2: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Hamilton product q1 * q2 (rotate by q2 first, then by q1).

    Args:
        q1: First quaternion [w, x, y, z], shape (4,)
        q2: Second quaternion [w, x, y, z], shape (4,)

    Returns:
        Product quaternion, shape (4,)
    """
    w1, x1, y1, z1 = q1
    w2, x2, y2, z2 = q2

    return np.array([
        w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
        w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
        w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
        w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
    ])


def quat_conj(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Quaternion conjugate (the inverse for unit quaternions)."""
    return np.array([q[0], -q[1], -q[2], -q[3]])


def quat_to_R(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Rotation matrix of a quaternion, v_world = R @ v_body.

    Args:
        q: Unit quaternion [w, x, y, z], shape (4,)

    Returns:
        Rotation matrix, shape (3, 3)
    """
    w, x, y, z = quat_normalize(q)
    return np.array([
        [1 - 2*(y*y + z*z),     2*(x*y - w*z),     2*(x*z + w*y)],
        [    2*(x*y + w*z), 1 - 2*(x*x + z*z),     2*(y*z - w*x)],
        [    2*(x*z - w*y),     2*(y*z + w*x), 1 - 2*(x*x + y*y)],
    ])


def quat_from_euler(roll: float, pitch: float, yaw: float) -> NDArray[np.float64]:
    """
    Build a unit quaternion from ZYX Euler angles.

    Inverse of :func:`quat_to_euler` away from the pitch singularity.
    """
    cr, sr = np.cos(0.5 * roll), np.sin(0.5 * roll)
    cp, sp = np.cos(0.5 * pitch), np.sin(0.5 * pitch)
    cy, sy = np.cos(0.5 * yaw), np.sin(0.5 * yaw)
    return np.array([
        cr * cp * cy + sr * sp * sy,
        sr * cp * cy - cr * sp * sy,
        cr * sp * cy + sr * cp * sy,
        cr * cp * sy - sr * sp * cy,
    ])


def quat_to_euler(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Convert quaternion to Euler angles [roll, pitch, yaw] (ZYX).

    Args:
        q: Unit quaternion [w, x, y, z], shape (4,)

    Returns:
        Euler angles in radians, shape (3,)
    """
    w, x, y, z = quat_normalize(q)

    roll = np.arctan2(2 * (w * x + y * z), 1 - 2 * (x * x + y * y))

    sinp = 2 * (w * y - z * x)
    # Gimbal lock
    if np.abs(sinp) >= 1:
        pitch = np.copysign(np.pi / 2, sinp)
    else:
        pitch = np.arcsin(sinp)

    yaw = np.arctan2(2 * (w * z + x * y), 1 - 2 * (y * y + z * z))

    return np.array([roll, pitch, yaw])


def quat_exp(rotvec: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Unit quaternion for a rotation vector (axis * angle).

    Uses the series expansion of sin(a/2)/a for tiny angles.
    """
    angle = np.linalg.norm(rotvec)
    half = 0.5 * angle
    if angle < 1e-8:
        k = 0.5 - angle * angle / 48.0
    else:
        k = np.sin(half) / angle
    return np.array([np.cos(half), k * rotvec[0], k * rotvec[1], k * rotvec[2]])


def quat_to_rotvec(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Rotation vector (axis * angle) of a quaternion, angle in [0, pi].

    The quaternion is taken on the hemisphere w >= 0 so the shortest
    rotation is returned.
    """
    q = quat_normalize(q)
    if q[0] < 0:
        q = -q
    vec = q[1:]
    s = np.linalg.norm(vec)
    if s < 1e-12:
        return 2.0 * vec
    angle = 2.0 * np.arctan2(s, q[0])
    return vec * (angle / s)


def quat_integrate(
    q: NDArray[np.float64],
    w_body: NDArray[np.float64],
    dt: float,
) -> NDArray[np.float64]:
    """
    Advance an attitude by a constant body rate over dt.

    Applies the exact exponential map q <- q * exp(w dt) and renormalizes
    to remove accumulated round-off.
    """
    return quat_normalize(quat_mul(q, quat_exp(w_body * dt)))
