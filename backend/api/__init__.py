from . import delegate_registrations, research, system, health

__all__ = [
    "delegate_registrations",
    "research",
    "system",
    "health",
]
