"""State layer.

Pure staleness policy, the battery latch, the lock record owned by
:class:`radarlock.coordinator.LockCoordinator`, and the events it emits.
"""
