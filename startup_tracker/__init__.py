"""
Startup Tracker: scrapes startup listings and keeps them in a relational store.
"""

__version__ = "0.1.0"
