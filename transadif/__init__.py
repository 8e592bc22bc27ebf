"""
transadif: ADIF log repair and re-encoding.

A library and CLI tool for reading ADIF log files written under inconsistent
character encodings. Detects the encoding, resolves byte/character field
length ambiguity, undoes mojibake and writes the log in a chosen encoding.

Usage:
    from transadif.core.adif import convert_file
    result = convert_file("log.adi")
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
