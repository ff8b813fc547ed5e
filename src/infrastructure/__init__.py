"""Infrastructure Layer.

Adapters implementing the domain ports against external services and
files. All I/O in the project happens here.
"""
