"""VX Academy learning-management backend."""

__version__ = "0.1.0"
