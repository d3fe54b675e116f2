"""
Invoice extraction service.

Turns uploaded PDF invoices into normalized, stored invoice records using
a language model for the structured extraction step.
"""

__version__ = "0.1.0"
