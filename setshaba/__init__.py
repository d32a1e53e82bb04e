"""
Setshaba Connect - citizen reporting API for municipal service delivery.
"""

__version__ = "1.0.0"
