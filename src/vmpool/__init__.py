"""
vmpool - provider-agnostic VM pool manager.
"""

__version__ = "0.1.0"
