"""perfect-segment package initialisation."""

__all__ = [
    "core",
    "devices",
    "reporting",
    "shared",
]
