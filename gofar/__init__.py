"""Build Go commands for several platforms and package them with their resources into a .far artifact."""

__version__ = "2.4.0"