"""Live data, prices, forecasts and storage for a home solar plant with a battery."""

__version__ = "0.1.0"