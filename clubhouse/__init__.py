"""
Clubhouse - club cricket match scoring and career statistics
"""
__version__ = "0.1.0"
