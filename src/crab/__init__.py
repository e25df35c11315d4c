"""crab - a local command-line credential manager."""

__version__ = '0.1.0'
