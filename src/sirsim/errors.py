"""
===========================================================
errors.py
Last Updated: 2026-10-19
===========================================================

Description:
    Exception and warning classes raised by the SIR engine.

    SIRError
      ├── ConfigurationError   invalid inputs, raised before integration
      ├── NumericalFailure     solver could not produce a finite trajectory
      └── MetricsError         metrics requested from an unusable trajectory

    SimulationWarning is emitted (never raised) for soft-property
    violations such as conservation drift or slightly negative
    compartments.
-----------------------------------------------------------
License: MIT
===========================================================
"""


class SIRError(Exception):
    """Base class for all errors raised by sirsim"""


class ConfigurationError(SIRError, ValueError):
    """Inputs rejected before integration starts"""


class NumericalFailure(SIRError, RuntimeError):
    """The solver failed, ran out of evaluations, or produced NaN/Inf"""


class MetricsError(SIRError, ValueError):
    """Metrics cannot be derived from the given trajectory"""


class SimulationWarning(UserWarning):
    pass
