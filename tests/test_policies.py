import numpy as np
import pytest

from skyswarm.core.env import SwarmEnv, make_agent
from skyswarm.core.state import Health, JammingZone, PhoneMotion
from skyswarm.policies.boids import BoidsPolicy
from skyswarm.policies.phone import PhonePolicy


def _act(policy, agent, others, goal=None, env=None):
    return policy.act(policy.build_observation(agent, others, goal, env))


class TestBoids:
    def test_separation_pushes_away(self):
        me = make_agent("a", (0, 0), 80)
        other = make_agent("b", (10, 0), 80)
        vel = _act(BoidsPolicy(), me, [me, other])
        # separation (-1.5) plus cohesion (+0.1), scaled by max_force
        np.testing.assert_allclose(vel, [-0.14, 0.0])

    def test_destroyed_neighbors_ignored(self):
        me = make_agent("a", (0, 0), 80)
        wreck = make_agent("b", (10, 0), 0)
        wreck.health = Health.DESTROYED
        np.testing.assert_allclose(_act(BoidsPolicy(), me, [me, wreck]), [0.0, 0.0])

    def test_alignment_follows_neighbor_velocity(self):
        me = make_agent("a", (0, 0), 80)
        other = make_agent("b", (0, 80), 80)  # outside separation, inside alignment
        other.vel = np.array([2.0, 0.0])
        vel = _act(BoidsPolicy(), me, [other])
        assert vel[0] == pytest.approx(2.0 * 0.1 * 0.1)

    def test_goal_seeking_above_threshold_only(self):
        me = make_agent("a", (0, 0), 80)
        np.testing.assert_allclose(_act(BoidsPolicy(), me, [], goal=(100, 0)), [0.05, 0.0])
        np.testing.assert_allclose(_act(BoidsPolicy(), me, [], goal=(300, 400)), [0.03, 0.04])
        np.testing.assert_allclose(_act(BoidsPolicy(), me, [], goal=(3, 0)), [0.0, 0.0])

    def test_speed_is_clamped(self):
        me = make_agent("a", (0, 0), 80)
        me.vel = np.array([10.0, 0.0])
        vel = _act(BoidsPolicy(max_speed=3.0), me, [], goal=(100, 0))
        assert np.linalg.norm(vel) == pytest.approx(3.0)

    def test_jamming_avoidance_is_added(self):
        env = SwarmEnv([0, 800, 0, 600], jamming_zones=[JammingZone("jam_1", (100.0, 100.0), 50.0, 100.0)])
        me = make_agent("a", (110, 100), 80)
        vel = _act(BoidsPolicy(), me, [], env=env)
        expected = env.avoidance_vector(me.pos) * 0.1
        np.testing.assert_allclose(vel, expected)

    def test_input_state_untouched(self):
        me = make_agent("a", (0, 0), 80)
        _act(BoidsPolicy(), me, [], goal=(100, 0))
        np.testing.assert_array_equal(me.vel, [0.0, 0.0])


class TestPhone:
    def test_holds_position_without_input(self):
        policy = PhonePolicy()
        agent = make_agent("mobile_drone", (0, 0), 85, heading=45.0, is_phone=True)
        obs = policy.build_observation(agent)
        np.testing.assert_array_equal(policy.act(obs), [0.0, 0.0])
        assert policy.heading(obs) == 45.0

    def test_tilt_maps_to_velocity(self):
        policy = PhonePolicy(speed=3.0)
        agent = make_agent("mobile_drone", (0, 0), 85, is_phone=True)
        obs = policy.build_observation(agent, motion=PhoneMotion(x=1.0, y=0.5, yaw=0.0, timestamp=0))
        np.testing.assert_allclose(policy.act(obs), [1.5, -3.0])

    def test_yaw_turns_heading_and_wraps(self):
        policy = PhonePolicy(yaw_rate=5.0)
        agent = make_agent("mobile_drone", (0, 0), 85, heading=358.0, is_phone=True)
        obs = policy.build_observation(agent, motion=PhoneMotion(0.0, 0.0, 1.0, 0))
        assert policy.heading(obs) == pytest.approx(3.0)

    def test_motion_clamped(self):
        m = PhoneMotion(x=4.0, y=-2.0, yaw=0.3, timestamp=10).clamped()
        assert (m.x, m.y, m.yaw) == (1.0, -1.0, 0.3)
