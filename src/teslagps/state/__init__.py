"""Drive/sleep coordination state machine.

This package decides, tick by tick, whether drive telemetry may be
fetched (which keeps the vehicle awake) and turns fetched samples into
track-log side effects.
"""
