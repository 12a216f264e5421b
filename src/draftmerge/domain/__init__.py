"""Domain layer: draft model, reconciliation and session state."""
