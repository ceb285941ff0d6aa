"""depconverge - dependency version convergence analysis for multi-module builds."""

__version__ = "1.0.0"
