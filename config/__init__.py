"""Top-level package for Django configuration.

Settings modules for the availability engine. The project has no URL
routes or server entry points of its own; it is consumed as a library
by the booking platform.
"""
