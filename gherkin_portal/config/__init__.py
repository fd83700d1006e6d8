"""
Reporter configuration: defaults, layered loading and validation.
"""
