"""Tyr — AI-powered threat modeling assistant for design-time security analysis."""

from tyr.config import AGENT_VERSION

__version__ = AGENT_VERSION
