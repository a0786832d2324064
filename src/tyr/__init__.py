"""Tyr: AI-assisted STRIDE threat modeling for architectures and infrastructure code."""

from __future__ import annotations

__version__ = "0.3.0"
__license__ = "MIT"
