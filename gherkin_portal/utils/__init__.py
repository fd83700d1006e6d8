"""
Utility functions module.

Time Semantics:
- All reporter timestamps are wall-clock UTC taken when the event is handled
- The reporting service receives them as epoch milliseconds
"""
