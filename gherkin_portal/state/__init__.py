"""
Lifecycle state machine module.

Maps the feature → scenario → step → hook event stream onto the
launch → suite → test → log hierarchy of the reporting service.
"""
