"""
rankbar - command palette for site analysis and content ideas
"""

__version__ = "0.3.0"
