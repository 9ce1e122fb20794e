"""Domain layer: economy and progression rules plus their exceptions."""
