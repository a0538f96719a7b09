"""Configuration block for the binary-merger strain grid.

All model constants live in a frozen ``WaveConfig``. Defaults reproduce the
reference visualization: a 20 x 20 lattice, an 8 s inspiral and a short
ringdown inside a 10 s animation sampled at 60 frames per second.

Quick use:
  from merger_config import make_config
  cfg = make_config(merger_time=6.0, lattice_size=24)

The driver exposes every field as a CLI flag (see ``add_config_arguments``).
"""
from __future__ import annotations
import os, math, argparse
from dataclasses import dataclass, fields, replace

# Driver defaults (not part of the core configuration block)
DEFAULT_DURATION = 10.0
DEFAULT_FPS = 60

# Smallest separation the timeline ever reports; keeps h0 / r finite.
SEPARATION_FLOOR = 1e-6


class ConfigError(ValueError):
    """Raised once at initialization for an unusable configuration."""


@dataclass(frozen=True)
class WaveConfig:
    lattice_size: int = 20
    cell_spacing: float = 30.0
    initial_separation: float = 120.0
    min_separation: float = 30.0
    merger_time: float = 8.0
    decay_exponent: float = 0.25
    strain_scale: float = 1.5
    orbital_frequency_scale: float = 1.5
    ringdown_damping_time: float = 0.4
    ringdown_frequency: float = 2.0

    @property
    def ringdown_amplitude(self) -> float:
        # matches the inspiral amplitude h0 / r at the merger boundary
        return self.strain_scale / max(self.min_separation, SEPARATION_FLOOR)

    def validate(self) -> "WaveConfig":
        problems = []
        for f in fields(self):
            val = getattr(self, f.name)
            if isinstance(val, bool) or not isinstance(val, (int, float)):
                problems.append(f"{f.name} must be a number (got {val!r})")
            elif not math.isfinite(val):
                problems.append(f"{f.name} must be finite (got {val!r})")
        if problems:
            raise ConfigError("; ".join(problems))

        if int(self.lattice_size) != self.lattice_size or self.lattice_size <= 0:
            problems.append(f"lattice_size must be a positive integer (got {self.lattice_size!r})")
        for name in ('cell_spacing', 'initial_separation', 'merger_time',
                     'decay_exponent', 'ringdown_damping_time',
                     'strain_scale', 'orbital_frequency_scale'):
            if getattr(self, name) <= 0:
                problems.append(f"{name} must be > 0 (got {getattr(self, name)!r})")
        if self.ringdown_frequency < 0:
            problems.append(f"ringdown_frequency must be >= 0 (got {self.ringdown_frequency!r})")
        if self.min_separation < 0:
            problems.append(f"min_separation must be >= 0 (got {self.min_separation!r})")
        elif self.initial_separation > 0 and self.min_separation >= self.initial_separation:
            problems.append(f"min_separation ({self.min_separation!r}) must be below "
                            f"initial_separation ({self.initial_separation!r})")
        if problems:
            raise ConfigError("; ".join(problems))
        return self


def make_config(**overrides) -> WaveConfig:
    """Build a validated config; unknown keys are a ConfigError."""
    known = {f.name for f in fields(WaveConfig)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration option(s): {', '.join(unknown)}")
    return replace(WaveConfig(), **overrides).validate()


# ---------------- CLI wiring -----------------
_HELP = {
    'lattice_size': 'Lattice points per side',
    'cell_spacing': 'Distance between neighbouring lattice points',
    'initial_separation': 'Orbital separation r0 at t=0',
    'min_separation': 'Minimum stable separation reached at the merger',
    'merger_time': 'Merger time t_merge in seconds (end of inspiral)',
    'decay_exponent': 'Exponent p in r(t) ~ (1 - t/t_merge)^p',
    'strain_scale': 'Strain scale h0 (amplitude is h0 / r)',
    'orbital_frequency_scale': 'Angular frequency (rad/s) at the initial separation',
    'ringdown_damping_time': 'Ringdown e-folding time tau in seconds',
    'ringdown_frequency': 'Ringdown oscillation frequency f_ring in Hz',
}


def add_config_arguments(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    defaults = WaveConfig()
    group = parser.add_argument_group('model')
    for f in fields(WaveConfig):
        default = getattr(defaults, f.name)
        group.add_argument('--' + f.name.replace('_', '-'), dest=f.name,
                           type=int if f.name == 'lattice_size' else float,
                           default=default,
                           help=f"{_HELP[f.name]} (default: %(default)s)")
    return parser


def config_from_args(args: argparse.Namespace) -> WaveConfig:
    return make_config(**{f.name: getattr(args, f.name) for f in fields(WaveConfig)})


def frames_from_env(frames: int | None, duration: float, fps: int) -> int:
    """Frame count: explicit value, else FRAMES env var, else duration * fps."""
    if frames is not None and frames <= 0:
        raise ValueError(f"frame count must be > 0 (got {frames!r})")
    if frames is None:
        env_frames = os.getenv('FRAMES')
        if env_frames and env_frames.isdigit():
            frames = int(env_frames)
    if frames is None:
        frames = int(round(duration * fps))
    return max(1, frames)
