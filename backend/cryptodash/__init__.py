"""
CryptoDash - Personal cryptocurrency dashboard backend
"""
__version__ = "1.0.0"
