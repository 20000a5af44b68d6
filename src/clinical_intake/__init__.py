"""
Clinical intake extraction engine.

Turns uploaded clinical documents into structured patient records and lab
report PDFs into persisted, classified lab results.
"""

__version__ = "0.1.0"
