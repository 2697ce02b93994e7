"""
Don't Perish: expiry-risk analysis and markdown suggestions for perishable stock.
"""

__version__ = "0.1.0"
