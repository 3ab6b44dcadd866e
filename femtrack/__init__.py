"""Workout-tracking WSGI API with bearer-token authentication and SQL stores."""

__version__ = "0.1.0"