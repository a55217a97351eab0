"""
provider-sync mirrors CAPIProvider resources into Cluster API Operator
providers, aggregating their status and conditions back into the CAPIProvider.
"""

__all__ = [
    "conditions",
    "manifest",
    "registry",
    "client",
    "sync",
    "exceptions",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
