"""Time-ordered 64-bit ID generation by region and worker, with an in-process command host."""

__version__ = "0.1.0"

__all__ = ["host", "module", "snowflake", "stats"]