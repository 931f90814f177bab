"""
rpcdeck - a terminal dashboard of JSON-RPC invocations.
"""

__version__ = "0.1.0"
