"""Infrastructure layer: configuration, logging, events, database access."""
