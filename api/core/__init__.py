"""Cross-cutting infrastructure: settings, logging, request telemetry, database."""
