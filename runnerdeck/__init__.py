"""Terminal dashboard and async client for an organization's self-hosted GitHub Actions runners."""

__version__ = "0.1.0"