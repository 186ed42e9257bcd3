"""
Compliance Records Tracker

Tracks licenses, contracts and administrative procedures, classifies every
expiry date into a compliance state and alerts operators before records lapse.
"""

__version__ = "1.0.0"
__author__ = "Compliance Tracking Team"
