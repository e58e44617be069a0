"""
Water and sewerage billing service.

Calculates tiered water bills with fees, VAT, meter rent and sewerage
charges, and bills bulk meters for unaccounted usage.
"""
__version__ = '1.0.0'
