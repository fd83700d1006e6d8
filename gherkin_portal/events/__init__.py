"""
Lifecycle event payloads delivered by the host test engine.
"""
