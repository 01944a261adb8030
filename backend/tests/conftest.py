"""Shared fixtures: an in-memory claims collection and canned model output."""

from __future__ import annotations

import copy
import json
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from pymongo.errors import DuplicateKeyError

from truthguard.models.claim import Claim, Scope, Verdict, VerdictLabel, VerifiedRecord
from truthguard.repository.claim_repository import ClaimRepository


def _matches(doc: dict, query: dict) -> bool:
    for key, expected in query.items():
        if isinstance(expected, dict) and "$in" in expected:
            if doc.get(key) not in expected["$in"]:
                return False
        elif doc.get(key) != expected:
            return False
    return True


def _project(doc: dict, projection: dict | None) -> dict:
    if not projection:
        return copy.deepcopy(doc)
    included = [key for key, flag in projection.items() if flag]
    if included:
        out = {key: doc[key] for key in included if key in doc}
        if projection.get("_id", 1) and "_id" in doc:
            out["_id"] = doc["_id"]
        return copy.deepcopy(out)
    return {key: copy.deepcopy(value) for key, value in doc.items() if projection.get(key, 1)}


class FakeCursor:
    def __init__(self, docs: list[dict]):
        self._docs = docs

    def sort(self, key: str, direction: int = 1) -> FakeCursor:
        self._docs = sorted(self._docs, key=lambda d: d.get(key), reverse=direction < 0)
        return self

    def limit(self, count: int) -> FakeCursor:
        self._docs = self._docs[:count]
        return self

    def __iter__(self):
        return iter(self._docs)


class FakeCollection:
    """Just enough of pymongo's Collection, including unique indexes."""

    def __init__(self):
        self.docs: list[dict] = []
        self.unique_fields: set[str] = set()
        self._next_id = 1

    def create_index(self, keys, unique: bool = False, **kwargs):
        if unique and isinstance(keys, str):
            self.unique_fields.add(keys)
        return keys if isinstance(keys, str) else "_".join(k for k, _ in keys)

    def insert_one(self, doc: dict):
        for field in self.unique_fields:
            if any(existing.get(field) == doc.get(field) for existing in self.docs):
                raise DuplicateKeyError(f"E11000 duplicate key error dup key: {{ {field}: ... }}", code=11000)
        stored = copy.deepcopy(doc)
        stored.setdefault("_id", self._next_id)
        self._next_id += 1
        self.docs.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    def find(self, query: dict | None = None, projection: dict | None = None) -> FakeCursor:
        return FakeCursor([_project(d, projection) for d in self.docs if _matches(d, query or {})])

    def count_documents(self, query: dict) -> int:
        return sum(1 for d in self.docs if _matches(d, query))

    def delete_many(self, query: dict):
        before = len(self.docs)
        self.docs = [d for d in self.docs if not _matches(d, query)]
        return SimpleNamespace(deleted_count=before - len(self.docs))


@pytest.fixture
def collection() -> FakeCollection:
    return FakeCollection()


@pytest.fixture
def repo(collection: FakeCollection) -> ClaimRepository:
    return ClaimRepository(collection)


@pytest.fixture
def verdict_payload() -> dict:
    """A well-formed model answer."""
    return {
        "verdict": "Misleading",
        "truth_score": 35,
        "propaganda_score": 60,
        "category": "Politics",
        "explanation": "Trusted outlets report a smaller change than the post claims.",
        "image_keywords": "parliament kathmandu vote",
    }


@pytest.fixture
def verdict(verdict_payload: dict) -> Verdict:
    return Verdict.model_validate(verdict_payload)


def make_response(payload) -> MagicMock:
    """Fake Gemini response whose .text carries the payload."""
    response = MagicMock()
    response.text = payload if isinstance(payload, str) else json.dumps(payload)
    return response


def seed_records(repo: ClaimRepository, scope: Scope, count: int) -> list[VerifiedRecord]:
    """Persist `count` records with strictly increasing creation times."""
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    records = []
    for i in range(count):
        record = VerifiedRecord(
            title=f"{scope.value} seeded claim number {i}",
            url=f"https://example.com/{scope.value.lower()}/{i}",
            source_label="r/seed",
            label=VerdictLabel.REAL,
            truth_score=80,
            propaganda_score=10,
            category="Social",
            explanation="Seeded for tests.",
            scope=scope,
            created_at=base + timedelta(minutes=i),
        )
        assert repo.persist(record)
        records.append(record)
    return records


def make_claims(*titles: str, source: str = "r/test") -> list[Claim]:
    return [Claim(title=t, url=f"https://reddit.com/{i}", source_label=source) for i, t in enumerate(titles)]
