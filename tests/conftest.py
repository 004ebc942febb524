"""Pytest configuration for ensuring local package imports."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_repo_on_syspath() -> None:
    repo_root = Path(__file__).resolve().parent.parent
    repo_str = str(repo_root)
    if repo_str not in sys.path:
        sys.path.insert(0, repo_str)


_ensure_repo_on_syspath()

from dronenav.rl.config import EnvConfig, RewardConfig  # noqa: E402
from dronenav.sim.physics import PhysicsConfig  # noqa: E402


@pytest.fixture
def env_cfg() -> EnvConfig:
    return EnvConfig()


@pytest.fixture
def reward_cfg() -> RewardConfig:
    return RewardConfig()


@pytest.fixture
def flat_physics() -> PhysicsConfig:
    """Physics with auto-hover off and no efficiency penalties."""
    return PhysicsConfig(use_auto_hover=False)
