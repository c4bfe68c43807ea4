"""
Havyn - Conversational Companion Backend

This package provides the backend services for Havyn, a conversational
companion with an embedded crisis-detection and emergency alert pipeline.

IMPORTANT: This is a safety-critical system. Nothing on the
escalation path may surface as an error to the person chatting.
"""

__version__ = "0.1.0"
__author__ = "Havyn Engineering Team"
