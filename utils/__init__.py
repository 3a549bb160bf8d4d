"""Chain data access, validation and export helpers for NEXUS."""
