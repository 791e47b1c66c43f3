# main.py

import pygame
import constants
import json
import logging
import logger_setup
import numpy as np
from renderer import Renderer
from simulation import NozzleSimulation

# Get the application's dedicated logger
logger = logging.getLogger("nozzle_sim")

# Parameter hotkeys: key -> (FlowParameters method, step)
PARAMETER_KEYS = {
    pygame.K_UP: ('adjust_sound_speed', constants.SOUND_SPEED_STEP),
    pygame.K_DOWN: ('adjust_sound_speed', -constants.SOUND_SPEED_STEP),
    pygame.K_RIGHT: ('adjust_injection_velocity', constants.INJECTION_VELOCITY_STEP),
    pygame.K_LEFT: ('adjust_injection_velocity', -constants.INJECTION_VELOCITY_STEP),
    pygame.K_RIGHTBRACKET: ('adjust_time_scale_percent', constants.TIME_SCALE_PERCENT_STEP),
    pygame.K_LEFTBRACKET: ('adjust_time_scale_percent', -constants.TIME_SCALE_PERCENT_STEP),
}


def handle_event(event, simulation: NozzleSimulation, renderer: Renderer) -> bool:
    """
    Applies one pygame event to the simulation. Returns False when the
    application should quit.
    """
    if event.type == pygame.QUIT:
        return False

    if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
        simulation.walls.begin_drag(event.pos)
    elif event.type == pygame.MOUSEMOTION:
        simulation.walls.drag(event.pos)
    elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
        simulation.walls.end_drag()
    elif event.type == pygame.VIDEORESIZE:
        screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
        renderer.resize(screen)
        simulation.resize((event.w, event.h))
    elif event.type == pygame.KEYDOWN:
        if event.key == pygame.K_ESCAPE:
            return False
        if event.key == pygame.K_r:
            simulation.walls.reset(*renderer.screen.get_size())
        elif event.key in PARAMETER_KEYS:
            method, step = PARAMETER_KEYS[event.key]
            getattr(simulation.params, method)(step)
    return True


def run_simulation_loop(simulation: NozzleSimulation, renderer: Renderer, clock: pygame.time.Clock):
    """
    The main loop. Each frame applies pending input, advances the simulation,
    then draws, so every frame sees a consistent geometry.
    """
    running = True
    while running:
        for event in pygame.event.get():
            if not handle_event(event, simulation, renderer):
                running = False

        markers = simulation.tick(pygame.time.get_ticks())
        renderer.draw_frame(simulation.walls, markers, simulation.particles, simulation.params)

        pygame.display.flip()
        clock.tick(constants.FPS)


def main():
    """
    Main function to initialize and run the nozzle flow simulation.
    """
    # --- Setup ---
    logger_setup.setup_logging()

    with open('config.json', 'r') as f:
        config = json.load(f)
    sim_config = config['simulation']

    logger.info("Application starting...")
    logger.info(f"Loaded configuration: {config}")

    # Initialize the master random number generator (RNG)
    rng = np.random.default_rng(config['master_seed'])
    logger.info(f"Master RNG initialized with seed: {config['master_seed']}")

    # --- Initialization ---
    pygame.init()
    screen = pygame.display.set_mode((constants.WIDTH, constants.HEIGHT), pygame.RESIZABLE)
    pygame.display.set_caption(constants.TITLE)
    clock = pygame.time.Clock()

    simulation = NozzleSimulation(sim_config, rng, (constants.WIDTH, constants.HEIGHT))
    renderer = Renderer(screen)

    run_simulation_loop(simulation, renderer, clock)

    logger.info("Application shutting down.")
    pygame.quit()

if __name__ == "__main__":
    main()
