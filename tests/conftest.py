# tests/conftest.py
from __future__ import annotations

import matplotlib
matplotlib.use("Agg")

import pytest

from merger_config import WaveConfig, make_config
from strain_grid import lattice_from_config


@pytest.fixture
def cfg() -> WaveConfig:
    return make_config()


@pytest.fixture
def lattice(cfg):
    return lattice_from_config(cfg)


@pytest.fixture(autouse=True)
def no_frames_env(monkeypatch):
    monkeypatch.delenv("FRAMES", raising=False)
    yield
