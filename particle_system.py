# particle_system.py

import numpy as np
import logging
import numba
import constants
from flow_model import _next_velocity_jit, _mach_transition_jit, cross_section_area
from units import meters_to_pixels

logger = logging.getLogger("nozzle_sim")

# --- JIT-Compiled Flow Update ---
# Kept outside the ParticleSystem class and operating only on NumPy arrays and
# scalars, as required by Numba's nopython mode. Wall geometry is evaluated
# beforehand with SciPy and passed in as per-particle areas.

@numba.jit(nopython=True)
def _update_velocities_jit(velocities, areas_upstream, areas_downstream, sound_speed,
                           injection_velocity, damping, near_sonic_band, transitions):
    """
    Applies the flow model to every particle in place and records, per
    particle, whether its Mach regime flipped (+1 into supersonic, -1 out of it).
    """
    for i in range(velocities.shape[0]):
        prev_mach = velocities[i] / sound_speed
        velocities[i] = _next_velocity_jit(
            areas_upstream[i], areas_downstream[i], velocities[i],
            sound_speed, injection_velocity, damping, near_sonic_band
        )
        transitions[i] = _mach_transition_jit(prev_mach, velocities[i] / sound_speed)


class ParticleSystem:
    """
    Manages the tracer particles streaming through the duct using vectorized
    NumPy arrays (Structure of Arrays).

    Data Contract:
    - Inputs:
        - rng (np.random.Generator): The master seeded random number generator.
        - bounds (tuple): The (width, height) of the simulation area in pixels.
    - Outputs: Per-particle arrays read by the renderer.
    - Side Effects: Reports Mach transitions to a ShockTracker and velocity
      samples to the walls on every update.
    - Invariants: All particle arrays share the same length (num_particles).
      normalized_lateral never changes after spawn; lateral is derived from
      the walls each update.
    """
    def __init__(self, rng: np.random.Generator, bounds: tuple):
        self.rng = rng
        self.bounds = np.array(bounds, dtype=float)
        self.last_spawn_time = 0.0

        # --- Initialize properties using NumPy arrays (Structure of Arrays) ---
        self.positions = np.zeros(0, dtype=float)  # Downstream, pixels
        self.normalized_lateral = np.zeros(0, dtype=float)  # 0 = top wall, 1 = bottom wall
        self.lateral = np.zeros(0, dtype=float)  # Pixels
        self.velocities = np.zeros(0, dtype=float)  # m/s
        self.sizes = np.zeros(0, dtype=float)
        self.opacities = np.zeros(0, dtype=float)
        self.supersonic = np.zeros(0, dtype=bool)

        logger.info(f"ParticleSystem created for a {bounds[0]}x{bounds[1]} domain.")

    @property
    def num_particles(self) -> int:
        return self.positions.shape[0]

    @property
    def width(self) -> float:
        return float(self.bounds[0])

    def _add_particles(self, positions: np.ndarray, params):
        count = len(positions)
        self.positions = np.concatenate((self.positions, positions))
        self.normalized_lateral = np.concatenate((self.normalized_lateral, self.rng.random(count)))
        self.lateral = np.concatenate((self.lateral, np.zeros(count)))
        self.velocities = np.concatenate((self.velocities, np.full(count, params.injection_velocity)))
        self.sizes = np.concatenate((
            self.sizes,
            self.rng.uniform(constants.MIN_PARTICLE_SIZE, constants.MAX_PARTICLE_SIZE, count)
        ))
        self.opacities = np.concatenate((
            self.opacities,
            self.rng.uniform(constants.MIN_PARTICLE_OPACITY, 1.0, count)
        ))
        self.supersonic = np.concatenate((
            self.supersonic,
            np.full(count, params.injection_velocity / params.sound_speed > 1)
        ))

    def spawn(self, now: float, params) -> int:
        """
        Injects a particle at the duct inlet if the spawn interval has elapsed.
        The interval shrinks as the time scale grows.

        - Inputs:
            - now (float): Current time in milliseconds.
            - params (FlowParameters): Live flow parameters.
        - Outputs: The number of particles spawned (0 or 1).
        """
        spawn_interval = constants.SPAWN_INTERVAL_MS / params.time_scale
        if now - self.last_spawn_time <= spawn_interval:
            return 0
        self._add_particles(np.zeros(1), params)
        self.last_spawn_time = now
        return 1

    def seed_across_duct(self, count: int, params):
        """Scatters particles uniformly along the duct so the flow is visible immediately."""
        self._add_particles(self.rng.random(count) * self.width, params)
        logger.info(f"Seeded {count} particles across the duct.")

    def resize(self, bounds: tuple):
        """Rescales particle positions to a new screen size."""
        new_bounds = np.array(bounds, dtype=float)
        self.positions *= new_bounds[0] / self.bounds[0]
        self.bounds = new_bounds

    def update(self, walls, tracker, params, now: float, dt: float = constants.FRAME_DT):
        """
        Runs one simulation step for all particles.

        1. Samples both walls at each particle and the bottom wall one
           look-ahead distance downstream.
        2. Places each particle between the walls by its normalized lateral.
        3. Updates velocities from the bottom-wall area ratio.
        4. Reports Mach transitions to the shock tracker.
        5. Records velocities at the walls' control points.
        6. Advances particles downstream and removes those that left the duct
           or stalled.

        - Inputs:
            - walls (WallPair): Duct geometry, already updated for this tick.
            - tracker (ShockTracker): Receives Mach transitions.
            - params (FlowParameters): Live flow parameters.
            - now (float): Current time in milliseconds.
            - dt (float): Real seconds per frame, before time scaling.
        """
        if self.num_particles == 0:
            return

        look_ahead = meters_to_pixels(constants.LOOK_AHEAD_METERS, self.width)
        top_y = walls.top.height_at(self.positions)
        bottom_y = walls.bottom.height_at(self.positions)
        bottom_y_ahead = walls.bottom.height_at(self.positions + look_ahead)

        self.lateral = top_y + self.normalized_lateral * (bottom_y - top_y)

        transitions = np.zeros(self.num_particles, dtype=np.int64)
        _update_velocities_jit(
            self.velocities,
            cross_section_area(bottom_y, self.width),
            cross_section_area(bottom_y_ahead, self.width),
            float(params.sound_speed),
            float(params.injection_velocity),
            constants.DAMPING_FACTOR,
            constants.NEAR_SONIC_BAND,
            transitions
        )

        for i in np.flatnonzero(transitions):
            tracker.report_transition(self.positions[i], int(transitions[i]), now)

        for x, velocity in zip(self.positions, self.velocities):
            walls.record_velocity(x, velocity)

        self.supersonic = self.velocities / params.sound_speed > 1

        dx_meters = self.velocities * dt * params.time_scale
        self.positions += meters_to_pixels(dx_meters, self.width)

        self._remove_finished()

    def _remove_finished(self):
        """Removes particles past the outlet or slower than MIN_PARTICLE_SPEED."""
        keep = (self.positions <= self.width) & (np.abs(self.velocities) >= constants.MIN_PARTICLE_SPEED)
        if keep.all():
            return
        self.positions = self.positions[keep]
        self.normalized_lateral = self.normalized_lateral[keep]
        self.lateral = self.lateral[keep]
        self.velocities = self.velocities[keep]
        self.sizes = self.sizes[keep]
        self.opacities = self.opacities[keep]
        self.supersonic = self.supersonic[keep]

    def mean_velocity(self) -> float:
        if self.num_particles == 0:
            return 0.0
        return float(np.mean(self.velocities))

    def supersonic_fraction(self) -> float:
        if self.num_particles == 0:
            return 0.0
        return float(np.mean(self.supersonic))
