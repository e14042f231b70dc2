#!/usr/bin/env python3
"""
Errors raised by the simulation core.

All of them are raised synchronously by the operation that was called with bad
input; the simulation state is left unchanged.
"""


class SimulationError(Exception):
    """Base class for every error the core reports."""


class InvalidParameter(SimulationError, ValueError):
    """Non-positive mass, density, speed or multiplier, or negative elapsed time."""


class UnknownBody(SimulationError, LookupError):
    """The body handle is not part of the simulation."""

    def __init__(self, handle):
        super().__init__(f"unknown body handle: {handle!r}")
        self.handle = handle


class InvalidLifecycleTransition(SimulationError):
    """The command is not allowed in the body's current lifecycle state."""
