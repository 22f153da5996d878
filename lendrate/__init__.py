"""Interest rate curves and failure taxonomy for a collateralized lending market."""

__version__ = "0.1.0"
