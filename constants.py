# constants.py

"""
Application Constants

This module defines static configuration values for the simulator's framework
and the tuning constants of the flow model. Live flow parameters (speed of
sound, injection velocity, time scale) are not here; they live in config.json
and in FlowParameters.

Data Contract:
- All values are immutable constants.
- Units are specified in comments where applicable.
"""

# Screen dimensions
WIDTH = 1600  # Pixels
HEIGHT = 800  # Pixels

# Framerate
FPS = 60  # Frames per second
FRAME_DT = 1.0 / FPS  # Seconds of simulated time per frame, before time scaling

# Colors (RGB)
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
RED = (255, 0, 0)
SUPERSONIC_RED = (255, 50, 50)
SUBSONIC_BLUE = (50, 50, 255)

# Window Title
TITLE = "Nozzle Flow Simulator"

# Physical scale
PHYSICAL_WIDTH_METERS = 5.0  # The full screen width maps onto this duct length.
LOOK_AHEAD_METERS = 0.1  # Distance ahead of a particle used for the area change.

# Flow model tuning
DAMPING_FACTOR = 0.05  # Keeps the explicit velocity update stable at interactive step sizes.
NEAR_SONIC_BAND = 0.01  # |1 - M^2| below this triggers the near-sonic reset.
MIN_PARTICLE_SPEED = 0.001  # m/s. Slower particles are removed.

# Wall profile
NUM_CONTROL_POINTS = 5
TOP_WALL_FRACTION = 0.2  # Default top wall height as a fraction of screen height.
BOTTOM_WALL_FRACTION = 0.8
WALL_WAVE_AMPLITUDE = 20  # Pixels. Default layout adds sin(i * pi / 2) * amplitude.
SPLINE_SAMPLES = 200  # Polyline resolution for drawing a wall.
MIN_KNOT_SPACING = 1.0  # Pixels. Control points closer than this are pushed apart.
VELOCITY_BUFFER_SIZE = 50  # Samples kept per control point.
VELOCITY_RECORD_DISTANCE = 50  # Pixels. A particle must be this close to a point to be recorded.
GRAB_RADIUS = 10  # Pixels. Mouse distance for grabbing a control point.

# Shock detection
SHOCK_GROUPING_METERS = 0.1  # Transitions are bucketed to the nearest 10 cm.
SHOCK_WINDOW = 100  # Events kept per bucket.
SHOCK_THRESHOLD = 1  # Transitions of one direction needed to draw a marker.
SHOCK_LIFETIME_MS = 300.0

# Particle spawning
SPAWN_INTERVAL_MS = 0.01  # Base spawn interval, divided by the time scale.
MIN_PARTICLE_SIZE = 1.0
MAX_PARTICLE_SIZE = 3.0
MIN_PARTICLE_OPACITY = 0.5

# Parameter control ranges and steps
SOUND_SPEED_RANGE = (100.0, 1000.0)  # m/s
INJECTION_VELOCITY_RANGE = (10.0, 1000.0)  # m/s
TIME_SCALE_PERCENT_RANGE = (0.1, 2.0)  # Percent of real time
SOUND_SPEED_STEP = 10.0
INJECTION_VELOCITY_STEP = 10.0
TIME_SCALE_PERCENT_STEP = 0.1

# Visual Effects
TRAIL_EFFECT_COLOR = (0, 0, 0, 26)  # RGBA. Alpha controls trail length (lower = longer).
WALL_LINE_WIDTH = 2
SHOCK_LINE_WIDTH = 3
CONTROL_POINT_RADIUS = 5
LABEL_FONT_SIZE = 14
HUD_FONT_SIZE = 18
