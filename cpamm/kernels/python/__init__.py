"""
Production Python kernels.

These modules are:
- deterministic (integer-only, checked 64.64 fixed point for ratios),
- side-effect free (they quote; the core moves funds through the ledger),
- small surface-area (pure functions, frozen result dataclasses).
"""
