"""Beer Distribution Game simulator."""
