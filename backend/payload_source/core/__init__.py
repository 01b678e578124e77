"""Core utilities: settings, logging, exceptions and constants."""
