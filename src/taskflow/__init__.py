# src/taskflow/__init__.py

"""Personal task list: in-memory task repository with pluggable storage."""

__version__ = "0.1.0"
