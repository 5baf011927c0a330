"""Finances app package.

Invoices issued when orders are confirmed, revenue reporting and the bank
accounts payments are received on.
"""
