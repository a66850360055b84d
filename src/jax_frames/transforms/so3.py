"""SO(3) rotation helpers in JAX.

This module converts between rotation matrices and the parameterizations
used by scene-description documents: roll-pitch-yaw angles and unit
quaternions. All functions are pure and operate on JAX arrays.
"""

import jax
import jax.numpy as jnp

Array = jax.Array


def from_rpy(rpy: Array) -> Array:
    """
    Convert roll-pitch-yaw angles to a rotation matrix.

    The rotation is applied as roll about X, then pitch about Y, then yaw
    about Z, i.e. R = Rz(yaw) @ Ry(pitch) @ Rx(roll).

    Args:
        rpy: (..., 3) array of [roll, pitch, yaw] angles in radians

    Returns:
        (..., 3, 3) array of rotation matrices
    """
    roll, pitch, yaw = jnp.moveaxis(jnp.asarray(rpy), -1, 0)

    cr, sr = jnp.cos(roll), jnp.sin(roll)
    cp, sp = jnp.cos(pitch), jnp.sin(pitch)
    cy, sy = jnp.cos(yaw), jnp.sin(yaw)

    # Expanded product Rz @ Ry @ Rx
    return jnp.stack([
        jnp.stack([cy * cp, cy * sp * sr - sy * cr, cy * sp * cr + sy * sr], axis=-1),
        jnp.stack([sy * cp, sy * sp * sr + cy * cr, sy * sp * cr - cy * sr], axis=-1),
        jnp.stack([-sp, cp * sr, cp * cr], axis=-1),
    ], axis=-2)


def to_rpy(R: Array) -> Array:
    """
    Convert a rotation matrix to roll-pitch-yaw angles.

    At gimbal lock (pitch = +-pi/2) roll is set to zero and the whole
    rotation about the vertical axis is reported as yaw.

    Args:
        R: (..., 3, 3) array of rotation matrices

    Returns:
        (..., 3) array of [roll, pitch, yaw] angles in radians
    """
    sin_pitch = jnp.clip(-R[..., 2, 0], -1.0, 1.0)
    pitch = jnp.arcsin(sin_pitch)
    locked = jnp.abs(sin_pitch) > 1.0 - 1e-9

    roll = jnp.where(locked, 0.0, jnp.arctan2(R[..., 2, 1], R[..., 2, 2]))
    yaw = jnp.where(
        locked,
        jnp.arctan2(-R[..., 0, 1], R[..., 1, 1]),
        jnp.arctan2(R[..., 1, 0], R[..., 0, 0]),
    )
    return jnp.stack([roll, pitch, yaw], axis=-1)


def from_quaternion(quaternions: Array) -> Array:
    """
    Convert quaternions to rotation matrices.

    Args:
        quaternions: (..., 4) array of quaternions in (w, x, y, z) format

    Returns:
        (..., 3, 3) array of rotation matrices
    """
    quaternions = jnp.asarray(quaternions)
    quaternions = quaternions / jnp.linalg.norm(quaternions, axis=-1, keepdims=True)
    w, x, y, z = jnp.moveaxis(quaternions, -1, 0)

    xx, yy, zz = x * x, y * y, z * z
    wx, wy, wz = w * x, w * y, w * z
    xy, xz, yz = x * y, x * z, y * z

    return jnp.stack([
        jnp.stack([1 - 2 * (yy + zz), 2 * (xy - wz), 2 * (xz + wy)], axis=-1),
        jnp.stack([2 * (xy + wz), 1 - 2 * (xx + zz), 2 * (yz - wx)], axis=-1),
        jnp.stack([2 * (xz - wy), 2 * (yz + wx), 1 - 2 * (xx + yy)], axis=-1),
    ], axis=-2)


def to_quaternion(R: Array) -> Array:
    """
    Convert rotation matrices to quaternions (w, x, y, z) with w >= 0.

    Args:
        R: (..., 3, 3) array of rotation matrices

    Returns:
        (..., 4) array of unit quaternions
    """
    m00, m01, m02 = R[..., 0, 0], R[..., 0, 1], R[..., 0, 2]
    m10, m11, m12 = R[..., 1, 0], R[..., 1, 1], R[..., 1, 2]
    m20, m21, m22 = R[..., 2, 0], R[..., 2, 1], R[..., 2, 2]
    trace = m00 + m11 + m22

    # One candidate per largest diagonal term; the best-conditioned one wins.
    candidates = jnp.stack([
        jnp.stack([trace + 1.0, m21 - m12, m02 - m20, m10 - m01], axis=-1),
        jnp.stack([m21 - m12, 1.0 + m00 - m11 - m22, m01 + m10, m02 + m20], axis=-1),
        jnp.stack([m02 - m20, m01 + m10, 1.0 + m11 - m00 - m22, m12 + m21], axis=-1),
        jnp.stack([m10 - m01, m02 + m20, m12 + m21, 1.0 + m22 - m00 - m11], axis=-1),
    ], axis=-2)
    scores = jnp.stack([trace, m00, m11, m22], axis=-1)
    best = jnp.argmax(scores, axis=-1)

    q = jnp.take_along_axis(candidates, best[..., None, None], axis=-2)[..., 0, :]
    q = q / jnp.linalg.norm(q, axis=-1, keepdims=True)
    return jnp.where(q[..., 0:1] < 0, -q, q)


def multiply(R1: Array, R2: Array) -> Array:
    """Compose two rotations, R1 @ R2."""
    return jnp.matmul(R1, R2)


def inverse(R: Array) -> Array:
    """Invert a rotation (its transpose)."""
    return jnp.swapaxes(R, -1, -2)
