"""Configuration for NEXUS."""
