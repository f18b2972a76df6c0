"""
cpamm: accounting core of a constant-product automated market maker.
"""

__version__ = "0.1.0"
