"""A C build driver configured by a TOML build file, with its own TOML reader."""

__version__ = "0.1.0"