"""Checkpointed on-chain event log synchronizer."""

__version__ = "0.1.0"
