"""Appointment scheduling engine for a single-location nail salon."""
