"""Authentication service client."""

from benchforge.auth.client import AuthClient, AuthError, SignupResult

__all__ = ["AuthClient", "AuthError", "SignupResult"]
