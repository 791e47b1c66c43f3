# shock_tracker.py

import logging
from collections import namedtuple

import constants

logger = logging.getLogger("nozzle_sim")

SUPERSONIC_ENTRY = 1
SUBSONIC_ENTRY = -1

# A single Mach transition reported by a particle.
ShockEvent = namedtuple('ShockEvent', ['direction', 'timestamp'])

# A marker for the renderer: a vertical segment between the walls at position.
ShockMarker = namedtuple('ShockMarker', ['position', 'top', 'bottom', 'opacity', 'category'])


class ShockTracker:
    """
    Turns the noisy stream of per-particle Mach transitions into stable,
    fading shock markers.

    Transitions are grouped into buckets keyed by their downstream position
    rounded to the nearest multiple of grouping_distance. A bucket lives for
    exactly as long as its newest event is younger than the lifetime.

    Data Contract:
    - Inputs:
        - grouping_distance (float): Bucket spacing in pixels.
        - window (int): Maximum events kept per bucket.
        - lifetime (float): Event lifetime in milliseconds.
        - threshold (int): Events of one direction needed for a marker.
    - Outputs: ShockMarker tuples from active_markers().
    - Invariants: Each bucket's event list is ordered by timestamp and holds
      at most `window` events.
    """
    def __init__(self, grouping_distance: float, window: int = constants.SHOCK_WINDOW,
                 lifetime: float = constants.SHOCK_LIFETIME_MS, threshold: int = constants.SHOCK_THRESHOLD):
        if grouping_distance <= 0:
            raise ValueError(f"grouping_distance must be positive, got {grouping_distance}")
        if window < 1 or threshold < 1:
            raise ValueError(f"window and threshold must be at least 1, got {window} and {threshold}")
        self.grouping_distance = grouping_distance
        self.window = window
        self.lifetime = lifetime
        self.threshold = threshold
        self.buckets = {}

    def bucket_key(self, x: float) -> float:
        return round(x / self.grouping_distance) * self.grouping_distance

    def report_transition(self, x: float, direction: int, timestamp: float):
        """Records a transition and trims its bucket to the window and the lifetime."""
        key = self.bucket_key(x)
        events = self.buckets.setdefault(key, [])
        events.append(ShockEvent(direction, timestamp))

        events = events[-self.window:]
        self.buckets[key] = [e for e in events if timestamp - e.timestamp < self.lifetime]

        logger.debug(
            f"Mach transition at x={x:.1f} (bucket {key:.1f}), "
            f"direction={'supersonic' if direction == SUPERSONIC_ENTRY else 'subsonic'}"
        )

    def prune_expired(self, now: float):
        """Deletes buckets that are empty or whose newest event has expired."""
        expired = [
            key for key, events in self.buckets.items()
            if not events or now - events[-1].timestamp >= self.lifetime
        ]
        for key in expired:
            del self.buckets[key]

    def active_markers(self, now: float, walls) -> list:
        """
        Returns a ShockMarker for every bucket with enough live transitions in
        one direction. Opacity fades linearly with the age of the newest event;
        the category is the dominant direction, supersonic on a tie.

        - Inputs:
            - now (float): Current time in milliseconds.
            - walls (WallPair): Supplies the wall heights at each marker.
        """
        markers = []
        for key, events in self.buckets.items():
            live = [e for e in events if now - e.timestamp < self.lifetime]
            if not live:
                continue

            super_count = sum(1 for e in live if e.direction == SUPERSONIC_ENTRY)
            sub_count = len(live) - super_count
            if super_count < self.threshold and sub_count < self.threshold:
                continue

            newest = max(e.timestamp for e in live)
            opacity = max(0.0, 1.0 - (now - newest) / self.lifetime)
            category = SUPERSONIC_ENTRY if super_count >= sub_count else SUBSONIC_ENTRY
            markers.append(ShockMarker(
                key,
                walls.top.height_at(key),
                walls.bottom.height_at(key),
                opacity,
                category
            ))
        return markers
