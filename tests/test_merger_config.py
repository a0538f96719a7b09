import argparse
import math

import pytest

from merger_config import (ConfigError, WaveConfig, add_config_arguments,
                           config_from_args, frames_from_env, make_config)


def test_defaults_are_valid():
    cfg = make_config()
    assert cfg == WaveConfig()
    assert cfg.lattice_size == 20
    assert cfg.merger_time == 8.0
    assert cfg.ringdown_amplitude == pytest.approx(cfg.strain_scale / cfg.min_separation)


@pytest.mark.parametrize("overrides", [
    {"lattice_size": 0},
    {"lattice_size": -3},
    {"lattice_size": 2.5},
    {"merger_time": 0.0},
    {"merger_time": -1.0},
    {"ringdown_damping_time": 0.0},
    {"cell_spacing": 0.0},
    {"decay_exponent": 0.0},
    {"initial_separation": 0.0},
    {"min_separation": -1.0},
    {"min_separation": 120.0},
    {"strain_scale": 0.0},
    {"orbital_frequency_scale": -1.0},
    {"ringdown_frequency": -0.5},
    {"merger_time": math.nan},
    {"strain_scale": math.inf},
    {"cell_spacing": "30"},
])
def test_invalid_config_is_rejected(overrides):
    with pytest.raises(ConfigError):
        make_config(**overrides)


def test_invalid_config_is_not_replaced_by_default():
    with pytest.raises(ConfigError) as exc:
        make_config(lattice_size=0, merger_time=0.0)
    msg = str(exc.value)
    assert "lattice_size" in msg and "merger_time" in msg


def test_unknown_option_is_rejected():
    with pytest.raises(ConfigError, match="frobnicate"):
        make_config(frobnicate=1)


def test_config_error_is_value_error():
    assert issubclass(ConfigError, ValueError)


def test_zero_min_separation_allowed():
    assert make_config(min_separation=0.0).min_separation == 0.0


def test_cli_flags_map_to_fields():
    parser = add_config_arguments(argparse.ArgumentParser())
    args = parser.parse_args(["--lattice-size", "24", "--merger-time", "6.5", "--ringdown-frequency", "3"])
    cfg = config_from_args(args)
    assert cfg.lattice_size == 24
    assert isinstance(cfg.lattice_size, int)
    assert cfg.merger_time == 6.5
    assert cfg.ringdown_frequency == 3.0
    assert cfg.cell_spacing == WaveConfig().cell_spacing


def test_cli_invalid_values_raise():
    parser = add_config_arguments(argparse.ArgumentParser())
    args = parser.parse_args(["--ringdown-damping-time", "0"])
    with pytest.raises(ConfigError):
        config_from_args(args)


def test_frames_default_from_duration_and_fps():
    assert frames_from_env(None, 10.0, 60) == 600


def test_frames_env_override(monkeypatch):
    monkeypatch.setenv("FRAMES", "12")
    assert frames_from_env(None, 10.0, 60) == 12


def test_frames_explicit_beats_env(monkeypatch):
    monkeypatch.setenv("FRAMES", "12")
    assert frames_from_env(5, 10.0, 60) == 5


@pytest.mark.parametrize("frames", [0, -5])
def test_frames_non_positive_rejected(frames):
    with pytest.raises(ValueError):
        frames_from_env(frames, 10.0, 60)


def test_frames_env_ignored_when_not_numeric(monkeypatch):
    monkeypatch.setenv("FRAMES", "lots")
    assert frames_from_env(None, 2.0, 30) == 60
