"""
Services module.

- sync: order reconciliation engine (adapters, matching, updates)
"""
