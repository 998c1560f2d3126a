# stiffkit/config.py
"""
Solver configuration and defaults.
"""

import logging
from dataclasses import dataclass


@dataclass
class SolverConfig:
    """Numerical settings for an analysis run."""

    # Max condition number of the free stiffness matrix (dense path)
    cond_limit: float = 1e12

    # Relative threshold for zero stiffness rows and zero-energy modes
    zero_tolerance: float = 1e-10

    # Assemble into scipy.sparse CSR and solve with spsolve
    sparse: bool = False


# Global config instance
CONFIG = SolverConfig()


LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    """Install a basic stderr handler for scripts and demos."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("stiffkit").setLevel(level)
