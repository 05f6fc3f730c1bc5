"""toonview: a catalog viewer/editor for the Disney character API."""

__version__ = "0.1.0"
