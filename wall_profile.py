# wall_profile.py

import logging
from collections import deque

import numpy as np
from scipy.interpolate import CubicSpline

import constants

logger = logging.getLogger("nozzle_sim")


class WallProfile:
    """
    One wall of the duct: a set of draggable control points joined by a
    natural cubic spline.

    Data Contract:
    - Inputs: points (array-like) - (n, 2) control points as (downstream, lateral)
      pairs in pixels. Lateral is measured downward from the top of the screen.
    - Outputs: Wall heights at arbitrary downstream positions.
    - Side Effects: Keeps a rolling buffer of recent particle velocities per
      control point for the velocity readout.
    - Invariants: self.points is always sorted by strictly increasing
      downstream position. The spline is rebuilt lazily after any change.
    """
    def __init__(self, points):
        self.points = np.zeros((0, 2), dtype=float)
        self.velocity_measurements = []
        self._spline = None
        self.set_control_points(points)

    @classmethod
    def default(cls, width: float, height: float, is_top: bool):
        """
        Creates the default layout: evenly spaced points across the screen,
        offset from the base height by a gentle sine wave.
        """
        base_y = height * (constants.TOP_WALL_FRACTION if is_top else constants.BOTTOM_WALL_FRACTION)
        indices = np.arange(constants.NUM_CONTROL_POINTS)
        xs = (width / (constants.NUM_CONTROL_POINTS - 1)) * indices
        ys = base_y + np.sin(indices * np.pi / 2) * constants.WALL_WAVE_AMPLITUDE
        return cls(np.column_stack((xs, ys)))

    def set_control_points(self, points):
        """Replaces all control points. Velocity buffers survive if the point count is unchanged."""
        points = np.array(points, dtype=float)
        if points.ndim != 2 or points.shape[1] != 2 or len(points) == 0:
            raise ValueError(f"Control points must be a non-empty (n, 2) array, got shape {points.shape}")

        self.points = points
        self._normalize()

        if len(self.velocity_measurements) != len(self.points):
            self.velocity_measurements = [
                deque(maxlen=constants.VELOCITY_BUFFER_SIZE) for _ in range(len(self.points))
            ]

    def move_point(self, index: int, position) -> int:
        """
        Moves one control point and returns its index after re-sorting, which
        changes if the point was dragged past a neighbor.
        """
        if not 0 <= index < len(self.points):
            raise IndexError(f"Control point index {index} out of range for {len(self.points)} points")

        # Tag the moved point so it can be found again after the sort.
        moved = np.zeros(len(self.points), dtype=bool)
        moved[index] = True
        self.points[index] = position
        order = np.argsort(self.points[:, 0], kind='stable')
        self.points = self.points[order]
        # Velocity buffers travel with their points.
        self.velocity_measurements = [self.velocity_measurements[i] for i in order]
        self._normalize()
        return int(np.flatnonzero(moved[order])[0])

    def _normalize(self):
        """Sorts the points and pushes apart any that share a downstream position."""
        self.points = self.points[np.argsort(self.points[:, 0], kind='stable')]
        for i in range(1, len(self.points)):
            min_x = self.points[i - 1, 0] + constants.MIN_KNOT_SPACING
            if self.points[i, 0] < min_x:
                self.points[i, 0] = min_x
        self._spline = None

    @property
    def spline(self):
        """The interpolating spline, rebuilt on first use after a change."""
        if self._spline is None and len(self.points) >= 2:
            self._spline = CubicSpline(self.points[:, 0], self.points[:, 1], bc_type='natural')
            logger.debug(f"Wall spline rebuilt over {len(self.points)} knots.")
        return self._spline

    @property
    def x_range(self):
        return self.points[0, 0], self.points[-1, 0]

    def height_at(self, x):
        """
        Returns the wall's lateral position at downstream position(s) x.
        Positions outside the control-point span return the nearest end
        point's height rather than extrapolating.
        """
        x = np.asarray(x, dtype=float)
        first_x, first_y = self.points[0]
        last_x, last_y = self.points[-1]

        if len(self.points) < 2:
            heights = np.full(x.shape, first_y)
        else:
            heights = self.spline(np.clip(x, first_x, last_x))
            heights = np.where(x <= first_x, first_y, heights)
            heights = np.where(x >= last_x, last_y, heights)

        if heights.ndim == 0:
            return float(heights)
        return heights

    def sample(self, num_points: int = constants.SPLINE_SAMPLES) -> np.ndarray:
        """Samples the wall as an (num_points, 2) polyline between its end points."""
        start, end = self.x_range
        xs = np.linspace(start, end, num_points)
        return np.column_stack((xs, self.height_at(xs)))

    def record_velocity(self, x: float, velocity: float):
        """Adds a velocity sample to the closest control point, if it is close enough."""
        distances = np.abs(self.points[:, 0] - x)
        closest_index = int(np.argmin(distances))
        if distances[closest_index] < constants.VELOCITY_RECORD_DISTANCE:
            self.velocity_measurements[closest_index].append(velocity)

    def average_velocity_at(self, index: int) -> float:
        measurements = self.velocity_measurements[index]
        if len(measurements) == 0:
            return 0.0
        return float(np.mean(measurements))

    def hit_test(self, position, radius: float = constants.GRAB_RADIUS):
        """Returns the index of the control point under position, or None."""
        diffs = self.points - np.asarray(position, dtype=float)
        hits = np.flatnonzero(np.sum(diffs**2, axis=1) < radius * radius)
        if len(hits) == 0:
            return None
        # Overlapping points: the last one wins.
        return int(hits[-1])


class WallPair:
    """
    The two walls of the duct and the mirrored-drag rule that keeps them
    symmetric about the horizontal centerline of the screen.

    Data Contract:
    - Inputs: width, height (float) - Screen size in pixels.
    - Side Effects: Drag operations move points on both walls.
    - Invariants: While a drag is active, drag_wall is self.top or self.bottom
      and drag_index addresses the dragged point. The opposite wall's point at
      the same index follows it when that index exists.
    """
    def __init__(self, width: float, height: float):
        self.reset(width, height)

    def reset(self, width: float, height: float):
        """Rebuilds both walls with the default layout, e.g. after a resize."""
        self.width = width
        self.height = height
        self.top = WallProfile.default(width, height, is_top=True)
        self.bottom = WallProfile.default(width, height, is_top=False)
        self.drag_wall = None
        self.drag_index = -1
        logger.info(f"Walls initialized for a {width}x{height} screen.")

    @property
    def walls(self):
        return self.top, self.bottom

    def mirror_of(self, wall: WallProfile) -> WallProfile:
        return self.bottom if wall is self.top else self.top

    def begin_drag(self, position) -> bool:
        """Starts dragging the control point under position. Returns True on a hit."""
        for wall in self.walls:
            index = wall.hit_test(position)
            if index is not None:
                self.drag_wall = wall
                self.drag_index = index
                return True
        return False

    def drag(self, position):
        """Moves the dragged point and the matching point on the opposite wall."""
        if self.drag_wall is None:
            return
        x, y = position
        mirror = self.mirror_of(self.drag_wall)
        # A point with no counterpart on the opposite wall moves alone.
        has_mirror = self.drag_index < len(mirror.points)
        new_index = self.drag_wall.move_point(self.drag_index, (x, y))
        if has_mirror:
            mirror.move_point(self.drag_index, (x, self.height - y))
        self.drag_index = new_index

    def end_drag(self):
        self.drag_wall = None
        self.drag_index = -1

    def record_velocity(self, x: float, velocity: float):
        for wall in self.walls:
            wall.record_velocity(x, velocity)
