"""signalbench: combine per-framework benchmark reports and sync them into docs."""

__version__ = "0.1.0"
