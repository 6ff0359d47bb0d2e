"""Go-Back-N ARQ simulator

Models a single sender and a single receiver over a link that independently
drops data segments and acknowledgments:
- the channel is a pure probabilistic gate, one draw per transmission
- sender and receiver own their state; the simulation driver passes segments between them
- runs advance in discrete window rounds and are reproducible from a seed
"""

from .config import ConfigError, RoundPolicy, SimConfig
from .simulation import RoundOutcome, Simulation, SimulationResult, simulate

__all__ = [
    "ConfigError",
    "RoundOutcome",
    "RoundPolicy",
    "SimConfig",
    "Simulation",
    "SimulationResult",
    "simulate",
]
