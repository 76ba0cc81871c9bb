"""Role resolution and permission decisions for the community platform."""

__version__ = "0.1.0"
