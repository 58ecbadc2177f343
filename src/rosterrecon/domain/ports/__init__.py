"""Ports consumed by the orphan record workflows."""
