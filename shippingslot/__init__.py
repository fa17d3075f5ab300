"""
Shipping slot scheduling: recurring delivery/pickup windows with capacity.
"""

__version__ = "0.1.0"
