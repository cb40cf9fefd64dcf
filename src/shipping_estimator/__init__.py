"""
Shipping Estimator Package

Validates package descriptions and estimates shipping cost and delivery
time, using a remote pricing service with a local formula fallback.
"""

__version__ = "1.0.0"
