"""
IO module for interview interfaces.

Provides the text interface for conducting interviews from a terminal.
"""

from hirelytics_interview.io.text_interface import TextInterface

__all__ = ["TextInterface"]
