"""
Spire Stats - Slay the Spire run history statistics.
"""

__version__ = "1.0.0"
