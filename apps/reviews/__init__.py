"""Guest star ratings of accommodations."""
