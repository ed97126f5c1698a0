"""Stencil - controller-driven template generator.

Renders Jinja2 templates whose data comes from user-supplied controller
classes resolved by name at build time.
"""

__version__ = "0.1.0"

# Configure logging for library use
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Re-export main CLI entry point
from .cli import main

__all__ = ["main"]
