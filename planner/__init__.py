"""SARS retirement projection backend."""
