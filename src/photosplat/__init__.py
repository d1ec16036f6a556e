"""photosplat: single photo to 3D Gaussian splat PLY."""

__version__ = "0.1.0"
