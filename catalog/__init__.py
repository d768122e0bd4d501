"""Read-only service catalog exposed over HTTP."""

__version__ = "1.0.0"
