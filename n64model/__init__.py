"""Convert 3D scenes into Nintendo 64 display lists, vertex data and animation frames."""

__version__ = "0.1.0"