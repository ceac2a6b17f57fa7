"""javastage — staging pipeline for Java applications."""

__version__ = "0.1.0"
