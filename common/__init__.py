"""
Shared infrastructure: JSON logging, YAML config, pixel/geo helpers.
"""
