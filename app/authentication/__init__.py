"""
Authentication application.

Holds the user directory the messaging core reads from: who a user is, what
their display name and avatar are, and whether their account is active.
Token issuance and verification are handled by djangorestframework-simplejwt.

Usage:
    from authentication.models import User
"""
