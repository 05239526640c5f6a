import math

import numpy as np
import pytest

from choreography.motion import (
    damp, damp_factor, identity_quats, nlerp_quats, quat_from_euler, quat_from_yaw, yaw_facing,
)


def test_damp_factor_bounds():
    assert damp_factor(3.0, 0.0) == 0.0
    assert damp_factor(0.0, 1 / 60) == 0.0
    f = damp_factor(3.0, 1 / 60)
    assert 0.0 < f < 1.0
    assert damp_factor(1000.0, 10.0) <= 1.0


def test_damped_distance_decreases_without_overshoot():
    pos = np.array([1.0, 0.0, 0.0])
    target = np.zeros(3)
    prev = 1.0
    for _ in range(120):
        pos = damp(pos, target, 3.0, 1 / 60)
        dist = float(np.linalg.norm(pos - target))
        assert dist < prev
        assert pos[0] > 0.0
        prev = dist
    assert prev < 0.01


def test_damp_in_place():
    cur = np.array([[2.0, 2.0, 2.0]])
    out = damp(cur, np.zeros((1, 3)), 3.0, 0.1, out=cur)
    assert out is cur
    assert np.all(cur < 2.0)


def test_large_step_does_not_pass_target():
    pos = damp(np.array([5.0]), np.array([0.0]), 3.0, 2.0)
    assert 0.0 <= pos[0] < 5.0


def test_identity_quats():
    q = identity_quats(4)
    assert q.shape == (4, 4)
    assert np.allclose(q, [0, 0, 0, 1])


def test_yaw_facing_turns_z_toward_direction():
    d = np.array([[1.0, 5.0, 0.0], [0.0, 0.0, 1.0], [-1.0, 0.0, -1.0]])
    yaw = yaw_facing(d)
    assert yaw[0] == pytest.approx(math.pi / 2)
    assert yaw[1] == pytest.approx(0.0)
    q = quat_from_yaw(yaw)
    assert np.allclose(np.linalg.norm(q, axis=1), 1.0)


def test_quat_from_euler_matches_yaw_only():
    assert np.allclose(quat_from_euler(0.0, 0.7, 0.0), quat_from_yaw(0.7))


def test_nlerp_takes_shorter_arc():
    cur = np.array([[0.0, 0.0, 0.0, 1.0]])
    tgt = -cur
    out = nlerp_quats(cur, tgt, 0.5)
    assert np.allclose(out, cur)


def test_nlerp_stays_normalized():
    cur = identity_quats(3)
    tgt = quat_from_yaw(np.array([0.5, 1.5, 3.0]))
    for _ in range(50):
        cur = nlerp_quats(cur, tgt, 0.1)
        assert np.allclose(np.linalg.norm(cur, axis=1), 1.0)
    assert np.allclose(cur, tgt, atol=1e-2)
