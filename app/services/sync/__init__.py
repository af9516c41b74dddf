"""
Order Sync Service

Reconciles orders scraped from WeareCloud with orders in JumpSeller, the
authoritative commerce platform.

Key components:
- Adapters: Fetch and normalize orders from each source
- Utils: Field normalization, confidence scoring, unified order building
- Matchers: Two-pass greedy assignment of WeareCloud to JumpSeller orders
- Update propagator: Field updates pushed to JumpSeller
- Orchestrator: Entry point used by the API routes
"""
