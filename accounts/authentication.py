"""
Token authentication for the administration API.

Tokens are issued by the login service that fronts this backend (or by
the ``ensure_admin`` management command); this module only verifies
them.  DRF rejects tokens of inactive users, so deactivating an account
immediately locks it out of the API.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """``Authorization: Token <key>`` authentication.

    Kept as a project class so settings reference a stable import path.
    """

    keyword = 'Token'
