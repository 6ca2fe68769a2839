"""
Hourbook Time Tracker Module

Daily logs, the working-day calendar, month reconciliation and the
pending-allocation editor.
"""
