"""End-to-end tick behaviour of DroneEnv with the reference integrator."""
from __future__ import annotations

import math

import numpy as np
import pytest
from pydantic import ValidationError

from dronenav.rl.config import EnvConfig, RewardConfig
from dronenav.rl.env import DroneEnv, build_observation
from dronenav.rl.episode import TerminalReason
from dronenav.rl.rewards import SuccessCounter, potential
from dronenav.rl.settings import ConfigUpdate
from dronenav.sim.drone import ActionCommand, AgentState
from dronenav.sim.physics import PhysicsConfig
from dronenav.sim.world import ContactTag, SphereObstacle, Target, WorldState


def _run_until_done(env: DroneEnv, action, limit: int = 500):
    result = None
    for _ in range(limit):
        result = env.step(action)
        if result.done:
            break
    return result


class TestObservation:
    def test_target_straight_ahead(self):
        state = AgentState(position=[0.0, 2.0, 0.0], velocity=[0.0, 0.0, 5.0])
        obs = build_observation(state, [0.0, 2.0, 25.0], 50.0, 50.0)
        assert obs.dtype == np.float32
        assert obs.shape == (8,)
        assert obs[:3] == pytest.approx([0.0, 0.0, 1.0])
        assert obs[3] == pytest.approx(0.5)
        assert obs[4:7] == pytest.approx([0.0, 0.0, 0.5])
        assert obs[7] == pytest.approx(2.0 / 50.0)

    def test_direction_is_in_body_frame(self):
        state = AgentState(position=[0.0, 2.0, 0.0], yaw=math.pi / 2, velocity=[10.0, 0.0, 0.0])
        obs = build_observation(state, [0.0, 2.0, 10.0], 50.0, 50.0)
        # facing +X, so a target on +Z sits to the left
        assert obs[:3] == pytest.approx([-1.0, 0.0, 0.0], abs=1e-6)
        assert obs[4:7] == pytest.approx([0.0, 0.0, 1.0], abs=1e-6)

    def test_distance_slot_is_clamped(self):
        state = AgentState(position=[0.0, 0.0, 0.0])
        obs = build_observation(state, [0.0, 0.0, 500.0], 50.0, 50.0)
        assert obs[3] == 1.0

    def test_missing_target_zeroes_target_slots(self):
        state = AgentState(position=[0.0, 5.0, 0.0], velocity=[1.0, 0.0, 0.0])
        obs = build_observation(state, None, 50.0, 50.0)
        assert obs[:4].tolist() == [0.0, 0.0, 0.0, 0.0]
        assert obs[4] == pytest.approx(0.1)
        assert obs[7] == pytest.approx(0.1)

    def test_degenerate_config_stays_finite(self):
        state = AgentState(position=[1.0, 2.0, 3.0], velocity=[1.0, 1.0, 1.0])
        obs = build_observation(state, [0.0, 0.0, 0.0], 0.0, 0.0)
        assert np.all(np.isfinite(obs))


class TestReset:
    def test_reset_integrity(self):
        env = DroneEnv()
        env.reset()
        for _ in range(5):
            env.step([0.0, 0.0, 0.5, 0.2])
        obs = env.reset()
        assert env.episode.step_count == 0
        assert env.episode.ground_hit_count == 0
        assert env.state.velocity == [0.0, 0.0, 0.0]
        assert env.state.yaw_rate == 0.0
        expected = potential(env.state.position, env.world.target.position, env.config.max_distance)
        assert env.episode.last_potential == expected
        assert obs.shape == (8,)

    def test_same_seed_same_rollout(self):
        cfg = dict(use_easy_mode=False, use_random_rotation=True, seed=7)
        rollouts = []
        for _ in range(2):
            env = DroneEnv(EnvConfig(**cfg))
            observations = [env.reset()]
            rewards = []
            for _ in range(30):
                result = env.step([0.3, 0.1, 0.8, -0.4])
                observations.append(result.obs)
                rewards.append(result.reward)
            rollouts.append((np.stack(observations), rewards))
        np.testing.assert_array_equal(rollouts[0][0], rollouts[1][0])
        assert rollouts[0][1] == rollouts[1][1]

    def test_reset_seed_reseeds(self):
        env = DroneEnv(EnvConfig(use_easy_mode=False))
        env.reset(seed=3)
        first = list(env.world.target.position)
        env.reset(seed=3)
        assert env.world.target.position == first

    def test_step_info_carries_agent_telemetry(self):
        env = DroneEnv()
        env.reset()
        result = env.step([0.0, 0.0, 1.0, 0.5])
        state = result.info["state"]
        assert state["pos"] == env.state.position
        assert state["vel"] == env.state.velocity
        assert state["yaw_rate"] == env.state.yaw_rate
        assert state["pos"] is not env.state.position

    def test_scheduler_reports_spawn_index(self):
        env = DroneEnv(EnvConfig(use_spawn_scheduler=True))
        seen = []
        for _ in range(5):
            env.reset()
            seen.append(env.step([0.0, 0.0, 0.0, 0.0]).info["spawn_index"])
        assert seen == [0, 1, 2, 3, 0]


class TestStep:
    def test_shaping_sum_matches_potential_change(self):
        env = DroneEnv(rewards=RewardConfig(discount_factor=1.0))
        env.reset()
        start = env.episode.last_potential
        total = 0.0
        for _ in range(50):
            result = env.step([0.0, 0.0, 0.2, 0.0])
            assert not result.done
            total += result.reward
        assert total == pytest.approx(env.episode.last_potential - start, abs=1e-9)
        assert env.episode.last_potential > start

    def test_success_by_flying_into_target(self):
        counter = SuccessCounter()
        cfg = EnvConfig(target_position=[0.0, 2.0, 6.0])
        env = DroneEnv(cfg, success_counter=counter)
        env.reset()
        result = _run_until_done(env, [0.0, 0.0, 1.0, 0.0])
        assert result.reason is TerminalReason.SUCCESS
        assert result.reward > 0.9
        assert env.success_count == 1
        assert counter.value == 1
        assert result.info["success_count"] == 1

    def test_obstacle_crash_overrides_return(self):
        world = WorldState(
            target=Target(position=[0.0, 0.5, 20.0]),
            obstacles=[SphereObstacle(center=[0.0, 2.0, 4.0], radius=1.0)],
        )
        env = DroneEnv(world=world)
        env.reset()
        result = _run_until_done(env, [0.0, 0.0, 1.0, 0.0])
        assert result.reason is TerminalReason.CRASH
        assert result.reward == -1.0
        assert env.episode.episode_reward == -1.0

    def test_ground_out_through_contact_entry_point(self):
        env = DroneEnv()
        env.reset()
        for _ in range(9):
            assert not env.resolve_contact(ContactTag.GROUND).done
        result = env.resolve_contact(ContactTag.GROUND)
        assert result.done
        assert result.reason is TerminalReason.GROUND_OUT
        assert result.reward == -1.0

    def test_dropping_on_the_ground_counts_contacts(self):
        env = DroneEnv(physics=PhysicsConfig(use_auto_hover=False))
        env.reset()
        for _ in range(200):
            result = env.step(ActionCommand(vertical=-1.0))
        assert env.episode.ground_hit_count == 1
        assert not result.done

    def test_timeout(self):
        env = DroneEnv(EnvConfig(max_episode_length=5))
        env.reset()
        results = [env.step([0.0, 0.0, 0.0, 0.0]) for _ in range(5)]
        assert [r.done for r in results] == [False, False, False, False, True]
        assert results[-1].reason is TerminalReason.TIMEOUT

    def test_step_after_termination(self, caplog):
        env = DroneEnv(EnvConfig(max_episode_length=1))
        env.reset()
        env.step([0.0, 0.0, 0.0, 0.0])
        result = env.step([0.0, 0.0, 1.0, 0.0])
        assert result.done
        assert result.reward == 0.0
        assert "terminated episode" in caplog.text

    def test_no_target_never_ends_on_distance(self):
        env = DroneEnv(EnvConfig(max_episode_length=20), world=WorldState(target=None))
        obs = env.reset()
        assert obs[:4].tolist() == [0.0, 0.0, 0.0, 0.0]
        result = _run_until_done(env, [0.0, 0.0, 1.0, 0.0])
        assert result.reason is TerminalReason.TIMEOUT
        assert result.info["distance"] is None

    def test_wrong_action_length(self):
        env = DroneEnv()
        env.reset()
        with pytest.raises(ValueError):
            env.step([0.0, 1.0])


class TestConfigure:
    def test_updates_take_effect(self):
        env = DroneEnv()
        env.configure(ConfigUpdate(reverse_efficiency=0.3, crash_penalty=-5.0, max_episode_length=7))
        assert env.physics.reverse_efficiency == 0.3
        assert env.rewards.crash_penalty == -5.0
        assert env.config.max_episode_length == 7
        assert env.episode.env_cfg.max_episode_length == 7

    def test_target_position_moves_target(self):
        env = DroneEnv()
        env.configure(ConfigUpdate(target_position=[1.0, 2.0, 3.0]))
        assert env.world.target.position == [1.0, 2.0, 3.0]

    def test_rejects_inverted_hover_band(self):
        with pytest.raises(ValidationError):
            ConfigUpdate(hover_height=10.0, ceiling_height=5.0)

    def test_partial_update_cannot_invert_hover_band(self):
        env = DroneEnv()
        with pytest.raises(ValueError):
            env.configure(ConfigUpdate(hover_height=env.physics.ceiling_height + 1.0))
        assert env.physics.hover_height == 2.0

    def test_equal_hover_band_is_accepted(self):
        env = DroneEnv()
        env.configure(ConfigUpdate(hover_height=5.0, ceiling_height=5.0))
        assert env.physics.ceiling_height == 5.0

    @pytest.mark.parametrize(
        "field, value",
        [
            ("max_distance", 0.0),
            ("force_multiplier", 0.0),
            ("reverse_efficiency", 1.5),
            ("strafe_efficiency", -0.1),
            ("discount_factor", 0.0),
            ("max_episode_length", 0),
        ],
    )
    def test_rejects_degenerate_values(self, field, value):
        with pytest.raises(ValidationError):
            ConfigUpdate(**{field: value})
