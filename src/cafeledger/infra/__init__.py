"""Infrastructure: database wiring and storage adapters."""
