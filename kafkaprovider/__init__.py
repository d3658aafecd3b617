"""Kafka topics and access control lists as resources, reconciled through a supplied admin client."""

__version__ = "0.1.0"