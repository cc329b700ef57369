"""Orchestration substrate clients."""

from .memory import InMemorySubstrate, SubstrateCall
from .kubectl import KubectlSubstrate

__all__ = ["InMemorySubstrate", "SubstrateCall", "KubectlSubstrate"]
