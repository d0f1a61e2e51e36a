"""
Traffic Guard AI
Backend Application Package

Roadside enforcement assistant: capture a vehicle, read its plate, check
it against the registry and the Motor Vehicles Act, and issue a warning
or e-challan to the owner.
"""

__version__ = "1.0.0"
