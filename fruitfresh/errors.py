"""Exception types shared across the fruitfresh package."""

from __future__ import annotations


class FruitFreshError(Exception):
    """Base class for all fruitfresh errors."""


class AnalysisError(FruitFreshError):
    """A call to the inference endpoint did not produce usable output."""


class NetworkFailure(AnalysisError):
    """Transport error or non-success status from the inference endpoint."""


class MalformedResponse(AnalysisError):
    """The endpoint answered but the candidate/text/image shape was missing."""


class PersistenceFailure(FruitFreshError):
    """The log store rejected a write."""


class ValidationFailure(FruitFreshError):
    """User input failed local validation; nothing was sent or stored."""
