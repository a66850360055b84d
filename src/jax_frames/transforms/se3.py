"""SE(3) poses as homogeneous matrices in JAX.

Every pose handled by the frame graphs is a (4, 4) homogeneous transform.
Composition follows the usual convention: the parent is on the left, so the
pose of A in C through B is ``multiply(pose_B_in_C, pose_A_in_B)``.
"""

import jax
import jax.numpy as jnp

from . import so3

Array = jax.Array


def identity() -> Array:
    """Return the identity pose."""
    return jnp.eye(4)


def from_position_and_rotation(p: Array, R: Array) -> Array:
    """
    Construct SE(3) transform from position and rotation.

    Args:
        p: (..., 3) position vector
        R: (..., 3, 3) rotation matrix

    Returns:
        (..., 4, 4) homogeneous transformation matrix
    """
    p = jnp.asarray(p)
    R = jnp.asarray(R)
    batch_shape = jnp.broadcast_shapes(p.shape[:-1], R.shape[:-2])
    p = jnp.broadcast_to(p, batch_shape + (3,))
    R = jnp.broadcast_to(R, batch_shape + (3, 3))

    T = jnp.zeros(batch_shape + (4, 4), dtype=jnp.result_type(p, R))
    T = T.at[..., :3, :3].set(R)
    T = T.at[..., :3, 3].set(p)
    T = T.at[..., 3, 3].set(1.0)

    return T


def from_xyz_rpy(values) -> Array:
    """
    Build a pose from the six numbers ``x y z roll pitch yaw``.

    Args:
        values: sequence or (6,) array

    Returns:
        (4, 4) homogeneous transformation matrix

    Raises:
        ValueError: if ``values`` does not hold exactly six numbers
    """
    values = jnp.asarray(values, dtype=jnp.float64)
    if values.shape != (6,):
        raise ValueError(f"pose must have 6 values (x y z roll pitch yaw), got shape {values.shape}")
    return from_position_and_rotation(values[:3], so3.from_rpy(values[3:]))


def from_xyz_quaternion(p, q) -> Array:
    """
    Build a pose from a position and a (w, x, y, z) quaternion.

    Raises:
        ValueError: if the shapes are not (3,) and (4,)
    """
    p = jnp.asarray(p, dtype=jnp.float64)
    q = jnp.asarray(q, dtype=jnp.float64)
    if p.shape != (3,) or q.shape != (4,):
        raise ValueError(f"expected position (3,) and quaternion (4,), got {p.shape} and {q.shape}")
    return from_position_and_rotation(p, so3.from_quaternion(q))


def to_xyz_rpy(T: Array) -> Array:
    """
    Flatten a pose to ``[x, y, z, roll, pitch, yaw]``.

    Args:
        T: (..., 4, 4) transformation matrix

    Returns:
        (..., 6) pose vector
    """
    return jnp.concatenate([get_position(T), so3.to_rpy(get_rotation(T))], axis=-1)


def multiply(T1: Array, T2: Array) -> Array:
    """
    Multiply two SE(3) transformation matrices.

    Args:
        T1: (..., 4, 4) first transformation matrix
        T2: (..., 4, 4) second transformation matrix

    Returns:
        (..., 4, 4) result of T1 @ T2
    """
    return jnp.matmul(T1, T2)


def inverse(T: Array) -> Array:
    """
    Compute inverse of SE(3) transformation matrix.

    Uses the block structure for efficient computation:
    T^-1 = [[R^T, -R^T @ t], [0, 1]]

    Args:
        T: (..., 4, 4) transformation matrix

    Returns:
        (..., 4, 4) inverse transformation matrix
    """
    R_inv = so3.inverse(get_rotation(T))
    t_inv = -jnp.einsum("...ij,...j->...i", R_inv, get_position(T))

    return from_position_and_rotation(t_inv, R_inv)


def get_position(T: Array) -> Array:
    """Extract the (..., 3) position from a pose."""
    return T[..., :3, 3]


def get_rotation(T: Array) -> Array:
    """Extract the (..., 3, 3) rotation matrix from a pose."""
    return T[..., :3, :3]


def is_close(T1: Array, T2: Array, atol: float = 1e-9) -> bool:
    """Return True when two poses agree element-wise within ``atol``."""
    return bool(jnp.allclose(T1, T2, rtol=0.0, atol=atol))
