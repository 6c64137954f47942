"""Authentication state for one client process.

The store is constructed explicitly and handed to whatever needs it. Its
``user`` and ``token`` are written to :class:`LocalStorage` under a fixed key
on every mutation and read back by :meth:`SessionStore.load`.
"""
import json
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from srms.client.api import ApiClient, ApiError
from srms.client.storage import LocalStorage
from srms.core import config
from srms.schemas import User

logger = logging.getLogger(__name__)

STORAGE_VERSION = 0


class SessionStore:
    def __init__(self, api: ApiClient, storage: LocalStorage, storage_key: str = config.SESSION_STORAGE_KEY):
        self.api = api
        self.storage = storage
        self.storage_key = storage_key
        self.user: User | None = None
        self.token: str | None = None
        self.is_loading = False

    @classmethod
    def restore(
        cls,
        api: ApiClient,
        storage: LocalStorage | None = None,
        storage_key: str = config.SESSION_STORAGE_KEY,
    ) -> "SessionStore":
        store = cls(api, storage or LocalStorage(config.SESSION_STORAGE_PATH), storage_key)
        store.load()
        return store

    def is_authenticated(self) -> bool:
        return self.token is not None and self.user is not None

    def login(self, email: str, password: str) -> bool:
        self.is_loading = True
        logger.info("Signing in %s", email)
        try:
            response = self.api.auth.login(email, password)
        except (ApiError, httpx.HTTPError, ValidationError) as exc:
            logger.info("Sign-in failed for %s: %s", email, exc)
            self.is_loading = False
            return False

        if not (response.success and response.data):
            logger.info("Sign-in rejected for %s: %s", email, response.message)
            self.is_loading = False
            return False

        self.api.set_token(response.data.token)
        self.user = response.data.user
        self.token = response.data.token
        self.is_loading = False
        self.save()
        logger.info("Signed in %s as %s", self.user.email, self.user.role)
        return True

    def logout(self) -> None:
        self.user = None
        self.token = None
        self.is_loading = False
        self.api.clear_token()
        self.storage.remove_item(self.storage_key)

    def set_user(self, user: User) -> None:
        self.user = user
        self.save()

    def set_token(self, token: str) -> None:
        self.token = token
        self.api.set_token(token)
        self.save()

    def snapshot(self) -> dict[str, Any]:
        return {
            "state": {
                "user": self.user.model_dump() if self.user else None,
                "token": self.token,
            },
            "version": STORAGE_VERSION,
        }

    def save(self) -> None:
        self.storage.set_item(self.storage_key, json.dumps(self.snapshot()))

    def load(self) -> None:
        raw = self.storage.get_item(self.storage_key)
        if not raw:
            return

        try:
            state = json.loads(raw).get("state") or {}
            user = User.model_validate(state["user"]) if state.get("user") else None
            token = state.get("token")
        except (ValueError, AttributeError, TypeError, ValidationError):
            logger.debug("Ignoring unreadable session entry %r", self.storage_key)
            return

        self.user = user
        self.token = token
        if token:
            self.api.set_token(token)
