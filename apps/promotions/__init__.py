"""Holidays and discounts consumed by order pricing."""
