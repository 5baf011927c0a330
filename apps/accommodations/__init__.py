"""Accommodations, rooms and benefits."""
