"""End-to-end suite for the todo application and its capacity limit."""

__version__ = "1.0.0"
