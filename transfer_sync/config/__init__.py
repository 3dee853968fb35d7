"""Configuration: settings, constants and sync job declarations."""
