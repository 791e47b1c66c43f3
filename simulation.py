# simulation.py

import logging
import numpy as np
import constants
from flow_model import FlowParameters
from particle_system import ParticleSystem
from shock_tracker import ShockTracker
from units import meters_to_pixels
from wall_profile import WallPair

logger = logging.getLogger("nozzle_sim")


class NozzleSimulation:
    """
    Owns the walls, particles, shock tracker and flow parameters, and runs
    them in a fixed order once per frame.

    Data Contract:
    - Inputs:
        - config (dict): The 'simulation' section of the config file.
        - rng (np.random.Generator): The master seeded random number generator.
        - bounds (tuple): The (width, height) of the screen in pixels.
    - Outputs: Shock markers from tick(); all other state is read directly
      by the renderer.
    - Invariants: Within a tick, wall edits are applied before particles read
      the walls, and particles finish updating before markers are produced.
    """
    def __init__(self, config: dict, rng: np.random.Generator, bounds: tuple):
        self.config = config
        self.params = FlowParameters.from_config(config)
        self.walls = WallPair(*bounds)
        self.particles = ParticleSystem(rng, bounds)
        self.tracker = self._make_tracker(bounds[0])
        self.markers = []
        self.tick_count = 0

        initial_particles = config.get('initial_particles', 0)
        if initial_particles > 0:
            self.particles.seed_across_duct(initial_particles, self.params)

        logger.info(f"Simulation created with parameters {self.params}")

    def _make_tracker(self, width: float) -> ShockTracker:
        return ShockTracker(
            grouping_distance=meters_to_pixels(constants.SHOCK_GROUPING_METERS, width),
            threshold=self.config.get('shock_threshold', constants.SHOCK_THRESHOLD)
        )

    def resize(self, bounds: tuple):
        """Resets the walls to the default layout for the new screen size."""
        self.walls.reset(*bounds)
        self.particles.resize(bounds)
        # Bucket keys are in pixels, so old buckets no longer line up.
        self.tracker = self._make_tracker(bounds[0])
        self.markers = []

    def tick(self, now: float, dt: float = constants.FRAME_DT) -> list:
        """
        Advances the simulation by one frame.

        - Inputs:
            - now (float): Current time in milliseconds.
            - dt (float): Real seconds per frame, before time scaling.
        - Outputs: The active shock markers after this tick.
        """
        self.particles.spawn(now, self.params)
        self.particles.update(self.walls, self.tracker, self.params, now, dt)

        self.tracker.prune_expired(now)
        self.markers = self.tracker.active_markers(now, self.walls)

        log_interval = self.config.get('log_interval_ticks', 300)
        if log_interval and self.tick_count % log_interval == 0:
            logger.debug(
                f"Tick={self.tick_count}, "
                f"Particles={self.particles.num_particles}, "
                f"MeanVelocity={self.particles.mean_velocity():.1f}, "
                f"Supersonic={self.particles.supersonic_fraction():.1%}, "
                f"ShockBuckets={len(self.tracker.buckets)}, "
                f"Markers={len(self.markers)}"
            )
        self.tick_count += 1
        return self.markers
