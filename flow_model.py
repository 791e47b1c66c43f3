# flow_model.py

"""
Quasi-1D compressible flow model.

The velocity of a tracer is advanced with the linearized isentropic relation

    (M^2 - 1) dv/v = dA/A

evaluated between the particle's current position and a short look-ahead
position. This is a visual approximation tuned for interactivity, not a
conservative solver: the increment is damped by DAMPING_FACTOR and the
near-sonic singularity is replaced by a reset to the injection velocity.
"""

import logging
from dataclasses import dataclass

import numba
import numpy as np

import constants
from units import pixels_to_meters

logger = logging.getLogger("nozzle_sim")


@dataclass
class FlowParameters:
    """
    The live flow parameters shared by the flow model and the particles.

    Data Contract:
    - sound_speed (float): Speed of sound in m/s. Sets the Mach number and the
      color threshold of the particles.
    - injection_velocity (float): Velocity in m/s given to new particles and
      used as the near-sonic reset value.
    - time_scale (float): Decimal multiplier on simulated time per frame. Also
      sets the particle spawn cadence.
    - Invariants: sound_speed and time_scale are strictly positive.
    """
    sound_speed: float = 343.0
    injection_velocity: float = 100.0
    time_scale: float = 0.01

    def __post_init__(self):
        if self.sound_speed <= 0:
            raise ValueError(f"sound_speed must be positive, got {self.sound_speed}")
        if self.time_scale <= 0:
            raise ValueError(f"time_scale must be positive, got {self.time_scale}")

    @classmethod
    def from_config(cls, sim_config: dict):
        """
        Builds parameters from the 'simulation' section of config.json.
        Values outside the control ranges are clamped to them.
        """
        sound_speed = np.clip(float(sim_config.get('sound_speed', 343.0)), *constants.SOUND_SPEED_RANGE)
        injection_velocity = np.clip(
            float(sim_config.get('injection_velocity', 100.0)), *constants.INJECTION_VELOCITY_RANGE
        )
        # The time scale is configured as a percentage of real time.
        time_scale_percent = np.clip(
            float(sim_config.get('time_scale_percent', 1.0)), *constants.TIME_SCALE_PERCENT_RANGE
        )
        return cls(
            sound_speed=float(sound_speed),
            injection_velocity=float(injection_velocity),
            time_scale=float(time_scale_percent) / 100.0,
        )

    @property
    def time_scale_percent(self) -> float:
        return self.time_scale * 100.0

    def adjust_sound_speed(self, delta: float):
        low, high = constants.SOUND_SPEED_RANGE
        self.sound_speed = float(np.clip(self.sound_speed + delta, low, high))
        logger.info(f"Speed of sound set to {self.sound_speed:.0f} m/s")

    def adjust_injection_velocity(self, delta: float):
        low, high = constants.INJECTION_VELOCITY_RANGE
        self.injection_velocity = float(np.clip(self.injection_velocity + delta, low, high))
        logger.info(f"Injection velocity set to {self.injection_velocity:.0f} m/s")

    def adjust_time_scale_percent(self, delta: float):
        low, high = constants.TIME_SCALE_PERCENT_RANGE
        percent = float(np.clip(self.time_scale_percent + delta, low, high))
        self.time_scale = percent / 100.0
        logger.info(f"Time scale set to {percent:.1f}%")


# --- JIT-Compiled Flow Kernels ---
# Kept as free functions on scalars so the particle advection kernel in
# particle_system.py can call them from nopython mode.

@numba.jit(nopython=True)
def _next_velocity_jit(area_upstream, area_downstream, velocity, sound_speed,
                       injection_velocity, damping, near_sonic_band):
    """Damped velocity update from the relative area change and local Mach number."""
    if area_upstream <= 0.0:
        return velocity

    mach = velocity / sound_speed
    one_minus_m_sq = 1.0 - mach * mach

    # The governing equation is singular at M = 1.
    if abs(one_minus_m_sq) < near_sonic_band:
        return injection_velocity

    d_area_ratio = (area_downstream - area_upstream) / area_upstream
    delta_v = -d_area_ratio * velocity / one_minus_m_sq
    return velocity + delta_v * damping


@numba.jit(nopython=True)
def _mach_transition_jit(prev_mach, new_mach):
    """+1 when crossing into supersonic flow, -1 when dropping out of it, else 0."""
    if prev_mach < 1.0 and new_mach >= 1.0:
        return 1
    if prev_mach >= 1.0 and new_mach < 1.0:
        return -1
    return 0


def next_velocity(area_upstream: float, area_downstream: float, current_velocity: float,
                  sound_speed: float, injection_velocity: float,
                  damping: float = constants.DAMPING_FACTOR) -> float:
    """
    Computes a particle's velocity after one step through a change of area.

    - Inputs:
        - area_upstream, area_downstream (float): Cross-sections in m^2.
        - current_velocity (float): Velocity in m/s.
        - sound_speed (float): Speed of sound in m/s.
        - injection_velocity (float): Value returned near Mach 1.
        - damping (float): Fraction of the physical increment that is applied.
    - Outputs: The new velocity in m/s.
    """
    return _next_velocity_jit(
        float(area_upstream),
        float(area_downstream),
        float(current_velocity),
        float(sound_speed),
        float(injection_velocity),
        float(damping),
        constants.NEAR_SONIC_BAND
    )


def mach_transition(prev_mach: float, new_mach: float) -> int:
    return _mach_transition_jit(float(prev_mach), float(new_mach))


def cross_section_area(height_px, screen_width: float):
    """
    Circular cross-section of the duct for a wall at the given screen height.

    The wall's height, measured from the top of the screen, is treated as the
    radius of the disc. Callers pass the bottom wall's height.
    Accepts scalars or NumPy arrays.
    """
    radius = pixels_to_meters(height_px, screen_width)
    return np.pi * radius * radius
