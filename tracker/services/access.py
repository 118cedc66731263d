from __future__ import annotations

import logging
import secrets
import threading
from typing import Optional

import streamlit as st

from tracker.errors import AccessDenied

logger = logging.getLogger(__name__)


class AccessGate:
    """
    Shared-secret gate for the admin/report view.

    A correct secret buys a random token; protected views check the token,
    not the password. Tokens last for the life of the process.
    """

    def __init__(self, secret: str):
        self._secret = str(secret)
        self._tokens: set[str] = set()
        self._lock = threading.Lock()

    def login(self, attempt: Optional[str]) -> str:
        if not secrets.compare_digest(str(attempt or "").encode(), self._secret.encode()):
            logger.warning("Admin login failed")
            raise AccessDenied("Invalid password")

        token = secrets.token_urlsafe(32)
        with self._lock:
            self._tokens.add(token)
        logger.info("Admin access granted")
        return token

    def is_authorized(self, token: Optional[str]) -> bool:
        if not token:
            return False
        with self._lock:
            return token in self._tokens

    def require(self, token: Optional[str]) -> None:
        if not self.is_authorized(token):
            raise AccessDenied("Admin access required")

    def logout(self, token: Optional[str]) -> None:
        with self._lock:
            self._tokens.discard(token or "")


@st.cache_resource
def get_access_gate(secret: str) -> AccessGate:
    return AccessGate(secret)
