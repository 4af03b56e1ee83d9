"""Fixture and random data for seeding a development database."""

from __future__ import annotations

import logging
import random as _random
import string
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from gatestore.dao.factory import DAOFactory

logger = logging.getLogger(__name__)

# ``__account`` / ``__api`` are 1-based indexes into the entities inserted
# earlier in the same run.
FIXTURES: dict[str, list[dict[str, Any]]] = {
    "accounts": [
        {"provider_id": "provider_123"},
        {"provider_id": "provider_124"},
    ],
    "apis": [
        {"name": "test", "public_dns": "test.com", "target_url": "http://httpbin.org"},
        {"name": "test2", "public_dns": "test2.com", "target_url": "http://httpbin.org"},
        {"name": "test3", "public_dns": "test3.com", "target_url": "http://httpbin.org"},
    ],
    "applications": [
        {"public_key": "apikey122", "__account": 1},
        {"public_key": "username", "secret_key": "password", "__account": 1},
    ],
    "plugins": [
        {
            "name": "authentication",
            "value": {"authentication_type": "query", "authentication_key_names": ["apikey"]},
            "__api": 1,
        },
        {"name": "authentication", "value": {"authentication_type": "basic"}, "__api": 2},
        {"name": "ratelimiting", "value": {"limit": 2, "period": "minute"}, "__api": 1},
    ],
}


class Faker:
    """Inserts fixtures and, optionally, random entities through the DAO."""

    def __init__(self, factory: DAOFactory, seed: int | None = None) -> None:
        self.factory = factory
        self._rng = _random.Random(seed)
        self._inserted: dict[str, list[dict[str, Any]]] = {k: [] for k in FIXTURES}

    def seed(self, random: bool = False, amount: int = 1000) -> dict[str, int]:
        """Insert the fixtures, then ``amount`` random entities per collection.

        Returns the number of entities inserted per collection.
        """
        for collection in ("accounts", "apis", "applications", "plugins"):
            for fixture in FIXTURES[collection]:
                self._insert(collection, self._resolve(fixture))

        if random:
            for _ in range(amount):
                self._insert("accounts", self.fake_entity("accounts"))
                self._insert("apis", self.fake_entity("apis"))
            for _ in range(amount):
                self._insert("applications", self.fake_entity("applications"))
            # One plugin per random API keeps the (api, application, name) triple unique.
            for api in self._inserted["apis"][len(FIXTURES["apis"]):]:
                self._insert("plugins", {**self.fake_entity("plugins"), "api_id": api["id"]})

        counts = {k: len(v) for k, v in self._inserted.items()}
        logger.info("Seeded %s", counts)
        return counts

    def fake_entity(self, collection: str) -> dict[str, Any]:
        """A random, schema-valid record for collection.

        Foreign fields point at entities already inserted by this Faker.
        """
        if collection == "accounts":
            return {"provider_id": self._token(16)}
        if collection == "apis":
            name = self._token(12).lower()
            return {"name": name, "public_dns": f"{name}.com", "target_url": "http://httpbin.org"}
        if collection == "applications":
            account = self._rng.choice(self._inserted["accounts"])
            return {"account_id": account["id"], "public_key": self._token(24), "secret_key": self._token(24)}
        if collection == "plugins":
            return {
                "name": "authentication",
                "value": {"authentication_type": "header", "authentication_key_names": ["x-api-key"]},
            }
        raise ValueError(f"Unknown collection '{collection}'")

    def _resolve(self, fixture: dict[str, Any]) -> dict[str, Any]:
        record = {k: v for k, v in fixture.items() if not k.startswith("__")}
        if "__account" in fixture:
            record["account_id"] = self._inserted["accounts"][fixture["__account"] - 1]["id"]
        if "__api" in fixture:
            record["api_id"] = self._inserted["apis"][fixture["__api"] - 1]["id"]
        return record

    def _insert(self, collection: str, record: dict[str, Any]) -> None:
        repository = self.factory.repositories[collection]
        self._inserted[collection].append(repository.insert(record))

    def _token(self, length: int) -> str:
        return "".join(self._rng.choice(string.ascii_letters + string.digits) for _ in range(length))
