"""HQ Desk: authoring console backend for knowledge cards and lesson plans."""

__version__ = "0.1.0"
