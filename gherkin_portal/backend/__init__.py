"""
Reporting backend interface, implementations and the best-effort call layer.
"""
