"""Configuration, logging, errors, record models and Qt events."""
