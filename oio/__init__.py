"""
oio — stash text, files, and screenshots behind short-lived IDs.
"""

__version__ = '0.4.0'
