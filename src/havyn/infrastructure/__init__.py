"""
Infrastructure layer: database, email, positioning, LLM and metrics
adapters.
"""
