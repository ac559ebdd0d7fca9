"""
synchpath - one-way directory tree synchronizer.
"""

__version__ = "0.4.0"
