"""Orphaned roster record reconciliation."""
