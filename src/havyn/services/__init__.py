"""Havyn services - crisis detection and emergency alerting."""
