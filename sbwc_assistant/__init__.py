"""SBWC Assistant - retrieval-augmented chat over workers' compensation documents."""

__version__ = "0.1.0"
