# logger_setup.py

import logging
import os
import json

def setup_logging(config_path='config.json', log_root='runs'):
    """
    Sets up logging for the simulator.

    Reads the logging configuration, creates a run-specific log directory, and
    configures the dedicated "nozzle_sim" logger (not the root logger) to write
    to both the console and a log file. Numba and pygame logs stay out of it.

    Data Contract:
    - Inputs:
        - config_path (str) - Path to the configuration file.
        - log_root (str) - Directory under which run directories are created.
    - Outputs: The configured logger.
    - Side Effects:
        - Configures the "nozzle_sim" logger.
        - Creates directories for log files.
    - Invariants: Assumes the config file contains 'run_id' and a 'logging' dictionary
      with 'level' and 'format'.
    """
    with open(config_path, 'r') as f:
        config = json.load(f)

    run_id = config['run_id']
    log_config = config['logging']

    # --- Dedicated simulator logger, kept off the root logger ---
    logger = logging.getLogger("nozzle_sim")
    logger.setLevel(log_config['level'])
    logger.propagate = False

    # --- One log directory per run ---
    log_dir = os.path.join(log_root, run_id)
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, 'simulation.log')

    # --- Formatter and handlers ---
    formatter = logging.Formatter(log_config['format'])

    # Run log file
    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(formatter)

    # Console
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)

    # --- Attach handlers ---
    # Clear existing handlers to avoid duplication if this function is called again
    if logger.hasHandlers():
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)

    logger.info(f"Logging initialized. Run ID: {run_id}. Log file: {log_file}")
    return logger
