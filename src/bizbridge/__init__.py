"""bizbridge: converged read/write access to weekly business records and contacts."""

__version__ = "0.1.0"
