"""
Destination video hosts.
"""
