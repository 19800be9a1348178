"""surfacecheck - detect breaking API changes between two versions of a source file."""

__version__ = "0.1.0"
