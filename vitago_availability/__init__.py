"""
Vitago availability - booking availability and conflict resolution for the Vitago marketplace.
"""

__version__ = "0.1.0"
