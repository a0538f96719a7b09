"""Orbit / ringdown timeline: time in, phase + orbit + strain out.

Phenomenological model (illustrative; not a GR waveform):

  inspiral  (t < t_merge):
    r(t)      = r_min + (r0 - r_min) * (1 - t/t_merge)^p
    omega(r)  = omega0 * (r / r0)^(-3/2)
    phi(t)    = omega(r(t)) * t
    h(t)      = h0 / r(t)
    h_plus    = h cos(2 phi),   h_cross = h sin(2 phi)

  ringdown  (t >= t_merge, dt = t - t_merge):
    A(dt)     = h_ring * exp(-dt / tau),   h_ring = h0 / r_min
    h_plus    = A cos(2 pi f_ring dt),     h_cross = A sin(2 pi f_ring dt)

Everything is recomputed from ``t``; nothing is carried between calls.
"""
from __future__ import annotations
import math
from enum import Enum
from typing import NamedTuple, Optional

import numpy as np

from merger_config import WaveConfig, SEPARATION_FLOOR


class Phase(Enum):
    INSPIRAL = 'inspiral'
    MERGER = 'merger'
    RINGDOWN = 'ringdown'


class OrbitalState(NamedTuple):
    separation: float
    phase_angle: float
    angular_frequency: float


class StrainTensor(NamedTuple):
    """Traceless symmetric 2x2 strain, stored as its two polarizations.

    h_xx = -h_yy = h_plus and h_xy = h_yx = h_cross. The diagonal is never
    stored separately, so the trace is zero by construction.
    """
    h_plus: float
    h_cross: float

    @property
    def h_xx(self) -> float:
        return self.h_plus

    @property
    def h_yy(self) -> float:
        return -self.h_plus

    @property
    def h_xy(self) -> float:
        return self.h_cross

    @property
    def amplitude(self) -> float:
        return math.hypot(self.h_plus, self.h_cross)

    def as_matrix(self) -> np.ndarray:
        return np.array([[self.h_plus, self.h_cross],
                         [self.h_cross, -self.h_plus]], dtype=float)


ZERO_STRAIN = StrainTensor(0.0, 0.0)


class WaveState(NamedTuple):
    t: float
    phase: Phase
    orbit: Optional[OrbitalState]
    strain: StrainTensor


def _check_time(t: float) -> float:
    t = float(t)
    if not math.isfinite(t) or t < 0:
        raise ValueError(f"time must be a finite value >= 0 (got {t!r})")
    return t


def phase_at(t: float, cfg: WaveConfig) -> Phase:
    t = _check_time(t)
    if t < cfg.merger_time:
        return Phase.INSPIRAL
    return Phase.MERGER if t == cfg.merger_time else Phase.RINGDOWN


def separation_at(t: float, cfg: WaveConfig) -> float:
    t = _check_time(t)
    r_min = cfg.min_separation
    if t >= cfg.merger_time:
        return max(r_min, SEPARATION_FLOOR)
    s = 1.0 - t / cfg.merger_time
    r = r_min + (cfg.initial_separation - r_min) * s**cfg.decay_exponent
    return max(r, SEPARATION_FLOOR)


def orbital_frequency(r: float, cfg: WaveConfig) -> float:
    # Keplerian scaling, normalized so omega(r0) = orbital_frequency_scale
    return cfg.orbital_frequency_scale * (r / cfg.initial_separation)**-1.5


def ringdown_envelope(dt: float, cfg: WaveConfig) -> float:
    if dt < 0:
        raise ValueError(f"ringdown offset must be >= 0 (got {dt!r})")
    # exp underflows to exactly 0.0 far past the merger, which is the settled state
    return cfg.ringdown_amplitude * math.exp(-dt / cfg.ringdown_damping_time)


def evaluate(t: float, cfg: WaveConfig) -> WaveState:
    """Physical state of the binary at time ``t`` (seconds, t >= 0)."""
    t = _check_time(t)
    phase = phase_at(t, cfg)

    if phase is Phase.INSPIRAL:
        r = separation_at(t, cfg)
        omega = orbital_frequency(r, cfg)
        phi = omega * t
        h = cfg.strain_scale / r
        # factor 2: quadrupole (spin-2) pattern
        strain = StrainTensor(h * math.cos(2*phi), h * math.sin(2*phi))
        return WaveState(t, phase, OrbitalState(r, phi, omega), strain)

    dt = t - cfg.merger_time
    A = ringdown_envelope(dt, cfg)
    if A == 0.0:
        return WaveState(t, phase, None, ZERO_STRAIN)
    # phase within the current cycle; f_ring * dt itself can overflow
    arg = 0.0
    if cfg.ringdown_frequency > 0:
        period = 1.0 / cfg.ringdown_frequency
        arg = 2*math.pi*math.fmod(dt, period)/period
    strain = StrainTensor(A * math.cos(arg), A * math.sin(arg))
    return WaveState(t, phase, None, strain)


def strain_envelope(t: float, cfg: WaveConfig) -> float:
    """Scalar amplitude h(t): h0 / r during the inspiral, A(dt) afterwards."""
    t = _check_time(t)
    if t < cfg.merger_time:
        return cfg.strain_scale / separation_at(t, cfg)
    return ringdown_envelope(t - cfg.merger_time, cfg)


def sample_waveform(times, cfg: WaveConfig) -> dict:
    """Evaluate the timeline over an array of times (for CSV / waveform panels)."""
    times = np.asarray(times, dtype=float).ravel()
    out = {
        't': times.copy(),
        'phase': [],
        'separation': np.zeros_like(times),
        'phase_angle': np.full_like(times, np.nan),
        'h_plus': np.zeros_like(times),
        'h_cross': np.zeros_like(times),
        'envelope': np.zeros_like(times),
    }
    for i, t in enumerate(times):
        st = evaluate(t, cfg)
        out['phase'].append(st.phase.value)
        out['separation'][i] = separation_at(t, cfg)
        if st.orbit is not None:
            out['phase_angle'][i] = st.orbit.phase_angle
        out['h_plus'][i], out['h_cross'][i] = st.strain
        out['envelope'][i] = strain_envelope(t, cfg)
    return out
