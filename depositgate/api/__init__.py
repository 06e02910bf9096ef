"""Depositgate HTTP boundary and outcome dispatch."""

from depositgate.api.app import create_app
from depositgate.api.dispatch import DepositResponse, dispatch_outcome

__all__ = ["create_app", "DepositResponse", "dispatch_outcome"]
