"""Frame decoder service."""
