"""Generate static EC2 price tables for Go sources.
"""

__version__ = "1.0"
