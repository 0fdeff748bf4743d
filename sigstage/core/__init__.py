"""Core matching engine: hashing, digest extraction, reconciliation."""
