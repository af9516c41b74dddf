"""
API routes.

- sync: order reconciliation between WeareCloud and JumpSeller
"""
