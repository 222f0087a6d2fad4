"""Credential lookup and secret resolution."""

from cloudbot.credentials.resolver import CredentialResolver
from cloudbot.credentials.store import (
    CredentialStore,
    EnvironmentCredentialStore,
    InMemoryCredentialStore,
)

__all__ = [
    "CredentialResolver",
    "CredentialStore",
    "EnvironmentCredentialStore",
    "InMemoryCredentialStore",
]
