from .assistant_context import AssistantContext, build_assistant_context, describe_circuit
from .engine import SimulationSnapshot, recompute
from .settings import SettingsManager, SimulationSettings
from .topology import find_closed_loops

__all__ = [
    'AssistantContext',
    'SettingsManager',
    'SimulationSettings',
    'SimulationSnapshot',
    'build_assistant_context',
    'describe_circuit',
    'find_closed_loops',
    'recompute',
]
