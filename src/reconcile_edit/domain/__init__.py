"""Domain model, ports and services for reconciliation edits."""
