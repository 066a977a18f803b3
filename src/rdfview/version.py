"""Version information for :mod:`rdfview`."""

VERSION = "0.1.0"
