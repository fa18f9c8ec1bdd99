from .hydration_orchestrator import HydrationOrchestrator, HydrationOutcome
from .hydration_scheduler import GEOCODE, HYDRATE, RELOAD, RESUME, HydrationScheduler
from .reload_coordinator import ReloadCoordinator

__all__ = [
    "GEOCODE",
    "HYDRATE",
    "HydrationOrchestrator",
    "HydrationOutcome",
    "HydrationScheduler",
    "RELOAD",
    "RESUME",
    "ReloadCoordinator",
]
