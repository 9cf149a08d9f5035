"""Configuration and transport."""
