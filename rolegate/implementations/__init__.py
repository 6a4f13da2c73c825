"""
Backend implementations of core interfaces.
"""
