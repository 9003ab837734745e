"""Credential adapters - password hashing and session tokens."""

from .credentials import BcryptJwtCredentials

__all__ = ["BcryptJwtCredentials"]
