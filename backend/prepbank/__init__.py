"""prepbank — placement-prep content bank with bulk CSV uploads."""

__version__ = "0.1.0"
