"""Thin wrapper over the sfdx command-line client."""

from .client import RetrievalSource, SalesforceDX

__all__ = ["RetrievalSource", "SalesforceDX"]
