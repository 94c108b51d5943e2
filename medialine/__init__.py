"""Pull-based media stream plumbing: broadcasters, constraints and raw media transforms."""

__version__ = "0.1.0"