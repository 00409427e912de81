"""
Video migration pipeline: manifest -> engine -> ledger.
"""
