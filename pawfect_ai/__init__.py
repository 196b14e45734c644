"""
Pawfect AI

Sitter trust scoring, time-slot recommendation and booking conflict
management for the pet-sitter marketplace.
"""

__version__ = "1.0.0"
