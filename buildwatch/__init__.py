"""Jenkins build status summary and lazily-populated build history."""

__version__ = "0.1.0"
