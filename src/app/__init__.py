"""BASTION HTTP driver."""
