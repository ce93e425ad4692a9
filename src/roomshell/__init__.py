"""roomshell: close segmented room scans into wall/ceiling/floor surfaces."""

__version__ = "0.1.0"
