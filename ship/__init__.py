"""Multi-architecture build, staging and runtime binary resolution."""

__version__ = "0.1.0"
