"""Scenario loading, validation and report export for the DG solar model."""
