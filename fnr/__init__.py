"""
fnr - batch rename files and directories by substring or regex
"""

__version__ = "0.1.0"
