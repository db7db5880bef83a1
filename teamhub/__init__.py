"""TeamHub HR: employee directory, departments and leave calendar."""

__version__ = "0.1.0"
