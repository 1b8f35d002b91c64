"""momentum-log: a local fitness log with momentum, XP and PR tracking."""

__version__ = "0.1.0"
