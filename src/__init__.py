"""
Dialog Preprocessing Pipeline

Turns crawled chat dialogs into clean, language-tagged token streams for
topic and language analysis.
"""

__version__ = "0.1.0"
__author__ = "Chat Analytics Team"

__all__ = []
