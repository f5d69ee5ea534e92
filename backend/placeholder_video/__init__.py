"""
Placeholder video generator.

Generates short solid-color clips with a centered text overlay using an
in-process FFmpeg engine. See main.create_app for the HTTP service.
"""

__version__ = "0.1.0"
