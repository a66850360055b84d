"""Tests for the transforms module."""

import hypothesis
import jax
import jax.numpy as jnp
import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

import jax_frames  # noqa: F401  (enables float64)
from jax_frames.transforms import se3, so3

# Use hypothesis profile for CI
hypothesis.settings.register_profile("ci", max_examples=10, deadline=None)

angles = st.floats(min_value=-3.0, max_value=3.0, allow_nan=False, allow_infinity=False)
coords = st.floats(min_value=-10.0, max_value=10.0, allow_nan=False, allow_infinity=False)


# SO(3) tests
def test_from_rpy_identity():
    """Zero angles give the identity rotation."""
    R = so3.from_rpy(jnp.zeros(3))
    np.testing.assert_allclose(R, jnp.eye(3), rtol=1e-12, atol=1e-12)


def test_from_rpy_single_axes():
    """Each angle rotates about its own axis."""
    R_roll = so3.from_rpy(jnp.array([jnp.pi / 2, 0.0, 0.0]))
    np.testing.assert_allclose(R_roll @ jnp.array([0.0, 1.0, 0.0]), [0.0, 0.0, 1.0], atol=1e-12)

    R_pitch = so3.from_rpy(jnp.array([0.0, jnp.pi / 2, 0.0]))
    expected = jnp.array([[0.0, 0.0, 1.0], [0.0, 1.0, 0.0], [-1.0, 0.0, 0.0]])
    np.testing.assert_allclose(R_pitch, expected, atol=1e-12)

    R_yaw = so3.from_rpy(jnp.array([0.0, 0.0, jnp.pi / 2]))
    np.testing.assert_allclose(R_yaw @ jnp.array([1.0, 0.0, 0.0]), [0.0, 1.0, 0.0], atol=1e-12)


def test_from_rpy_order():
    """Roll is applied first, then pitch, then yaw."""
    rpy = jnp.array([0.1, 0.2, 0.3])
    Rx = so3.from_rpy(jnp.array([0.1, 0.0, 0.0]))
    Ry = so3.from_rpy(jnp.array([0.0, 0.2, 0.0]))
    Rz = so3.from_rpy(jnp.array([0.0, 0.0, 0.3]))
    np.testing.assert_allclose(so3.from_rpy(rpy), Rz @ Ry @ Rx, atol=1e-12)


def test_from_rpy_batched():
    """Batched angles give batched matrices."""
    rpy = jax.random.uniform(jax.random.PRNGKey(0), (5, 3), minval=-1.0, maxval=1.0)
    R = so3.from_rpy(rpy)
    assert R.shape == (5, 3, 3)
    for i in range(5):
        np.testing.assert_allclose(R[i], so3.from_rpy(rpy[i]), atol=1e-12)


def test_to_rpy_roundtrip():
    """to_rpy inverts from_rpy away from gimbal lock."""
    rpy = jnp.array([0.4, -0.7, 2.5])
    np.testing.assert_allclose(so3.to_rpy(so3.from_rpy(rpy)), rpy, atol=1e-9)


def test_to_rpy_gimbal_lock():
    """At pitch = pi/2 roll folds into yaw but the rotation is preserved."""
    R = so3.from_rpy(jnp.array([0.3, jnp.pi / 2, 0.0]))
    rpy = so3.to_rpy(R)
    np.testing.assert_allclose(rpy[0], 0.0, atol=1e-9)
    np.testing.assert_allclose(rpy[1], jnp.pi / 2, atol=1e-6)
    np.testing.assert_allclose(so3.from_rpy(rpy), R, atol=1e-6)


def test_quaternion_identity():
    """Identity quaternion maps to the identity matrix and back."""
    identity_quat = jnp.array([1.0, 0.0, 0.0, 0.0])
    np.testing.assert_allclose(so3.from_quaternion(identity_quat), jnp.eye(3), atol=1e-12)
    np.testing.assert_allclose(so3.to_quaternion(jnp.eye(3)), identity_quat, atol=1e-12)


def test_quaternion_matches_rpy():
    """A 90 degree quaternion about Y matches pitch = pi/2."""
    quat = jnp.array([jnp.sqrt(0.5), 0.0, jnp.sqrt(0.5), 0.0])
    np.testing.assert_allclose(
        so3.from_quaternion(quat), so3.from_rpy(jnp.array([0.0, jnp.pi / 2, 0.0])), atol=1e-12)


@given(st.integers(min_value=0, max_value=100))
@settings(deadline=None)
def test_quaternion_roundtrip(seed):
    """quaternion -> matrix -> quaternion gives the same rotation."""
    key = jax.random.PRNGKey(seed)
    quat = jax.random.uniform(key, (4,), minval=-1.0, maxval=1.0)
    quat = quat / jnp.linalg.norm(quat)

    quat2 = so3.to_quaternion(so3.from_quaternion(quat))

    # q and -q represent the same rotation
    assert jnp.abs(jnp.sum(quat * quat2)) > 0.999999


def test_so3_inverse():
    """R @ R^-1 is the identity."""
    R = so3.from_rpy(jnp.array([0.1, 0.2, 0.3]))
    np.testing.assert_allclose(so3.multiply(R, so3.inverse(R)), jnp.eye(3), atol=1e-12)


# SE(3) tests
def test_se3_from_position_and_rotation():
    """SE(3) construction from position and rotation."""
    T = se3.from_position_and_rotation(jnp.array([1.0, 2.0, 3.0]), jnp.eye(3))

    expected = jnp.array([[1.0, 0.0, 0.0, 1.0], [0.0, 1.0, 0.0, 2.0], [0.0, 0.0, 1.0, 3.0], [0.0, 0.0, 0.0, 1.0]])
    np.testing.assert_allclose(T, expected, atol=1e-12)


def test_se3_from_xyz_rpy():
    """Six authored numbers become position and rotation."""
    T = se3.from_xyz_rpy([1.0, 2.0, 3.0, 0.1, 0.2, 0.3])
    np.testing.assert_allclose(se3.get_position(T), [1.0, 2.0, 3.0], atol=1e-12)
    np.testing.assert_allclose(se3.get_rotation(T), so3.from_rpy(jnp.array([0.1, 0.2, 0.3])), atol=1e-12)
    assert T.dtype == jnp.float64


@pytest.mark.parametrize("values", [[], [1.0, 2.0, 3.0], [0.0] * 7])
def test_se3_from_xyz_rpy_wrong_length(values):
    """Anything but six values is rejected."""
    with pytest.raises(ValueError, match="pose must have 6 values"):
        se3.from_xyz_rpy(values)


def test_se3_from_xyz_quaternion():
    """Position plus quaternion matches the equivalent rpy pose."""
    T = se3.from_xyz_quaternion([1.0, 0.0, 0.0], [jnp.sqrt(0.5), 0.0, 0.0, jnp.sqrt(0.5)])
    expected = se3.from_xyz_rpy([1.0, 0.0, 0.0, 0.0, 0.0, jnp.pi / 2])
    np.testing.assert_allclose(T, expected, atol=1e-12)

    with pytest.raises(ValueError):
        se3.from_xyz_quaternion([1.0, 0.0], [1.0, 0.0, 0.0, 0.0])


def test_se3_to_xyz_rpy():
    """to_xyz_rpy flattens a pose back to its authored values."""
    values = jnp.array([1.0, -2.0, 0.5, 0.3, -0.2, 1.1])
    np.testing.assert_allclose(se3.to_xyz_rpy(se3.from_xyz_rpy(values)), values, atol=1e-9)


def test_se3_multiply_parent_on_left():
    """Composition applies the child transform inside the parent frame."""
    parent = se3.from_xyz_rpy([2.0, 0.0, 0.0, 0.0, jnp.pi / 2, 0.0])
    child = se3.from_xyz_rpy([0.0, 0.0, 2.0, 0.0, 0.0, 0.0])

    T = se3.multiply(parent, child)

    # The child's +z offset is parent's +x after the pitch.
    expected = se3.from_xyz_rpy([4.0, 0.0, 0.0, 0.0, jnp.pi / 2, 0.0])
    np.testing.assert_allclose(T, expected, atol=1e-12)


def test_se3_inverse():
    """T @ T^-1 is the identity."""
    T = se3.from_xyz_rpy([0.1, 0.2, 0.3, 0.05, 0.1, 0.15])
    np.testing.assert_allclose(se3.multiply(T, se3.inverse(T)), jnp.eye(4), atol=1e-12)
    np.testing.assert_allclose(se3.multiply(se3.inverse(T), T), jnp.eye(4), atol=1e-12)


def test_se3_is_close():
    """is_close compares element-wise with an absolute tolerance."""
    T = se3.from_xyz_rpy([1.0, 0.0, 0.0, 0.0, 0.0, 0.0])
    assert se3.is_close(T, T)
    assert se3.is_close(T, T + 1e-12)
    assert not se3.is_close(T, se3.identity())


def test_se3_jit_compatibility():
    """Pose construction and inversion are JIT compatible."""
    values = jnp.array([0.1, 0.2, 0.3, 0.05, 0.1, 0.15])
    T = jax.jit(se3.from_xyz_rpy)(values)
    T_inv = jax.jit(se3.inverse)(T)

    np.testing.assert_allclose(T, se3.from_xyz_rpy(values), atol=1e-12)
    np.testing.assert_allclose(se3.multiply(T, T_inv), jnp.eye(4), atol=1e-12)


@given(st.tuples(coords, coords, coords, angles, angles, angles))
@settings(deadline=None, max_examples=25)
def test_se3_inverse_property(values):
    """Inverse law holds for arbitrary authored poses."""
    T = se3.from_xyz_rpy(list(values))
    np.testing.assert_allclose(se3.multiply(se3.inverse(T), T), jnp.eye(4), atol=1e-9)


@given(
    st.tuples(coords, coords, coords, angles, angles, angles),
    st.tuples(coords, coords, coords, angles, angles, angles),
    st.tuples(coords, coords, coords, angles, angles, angles),
)
@settings(deadline=None, max_examples=25)
def test_se3_multiply_associative(a, b, c):
    """Composition is associative."""
    A, B, C = (se3.from_xyz_rpy(list(v)) for v in (a, b, c))
    np.testing.assert_allclose(
        se3.multiply(se3.multiply(A, B), C), se3.multiply(A, se3.multiply(B, C)), atol=1e-9)
