"""BASTION — single-tower defense simulation."""

__version__ = "0.1.0"
