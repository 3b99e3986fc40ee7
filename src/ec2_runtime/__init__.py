"""EC2 client runtime support package.

This package provides the bootstrap layer for an EC2 API client. It
resolves regional endpoints, waits for asynchronously initiated cloud
operations to settle, and decides how HTTP-level failures are retried
or translated into typed errors.

:var __version__: Current package version
:type __version__: str
"""

__version__ = "0.1.0"
