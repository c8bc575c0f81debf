"""
learnpath - Course delivery client with offline catalog and on-device progress.
"""

__version__ = "0.1.0"
