"""Tests for ClaimRepository (dedup and persistence gate)."""

from __future__ import annotations

from conftest import FakeCollection, make_claims, seed_records
from truthguard.models.claim import Claim, Scope, Verdict, VerifiedRecord
from truthguard.repository.claim_repository import ClaimRepository


def record_for(title: str, verdict: Verdict, scope: Scope = Scope.LOCAL, source: str = "r/test") -> VerifiedRecord:
    return VerifiedRecord.from_verdict(Claim(title=title, source_label=source), verdict, "NO_MATCHING_SOURCES", scope)


class TestClaimRepository:
    """Tests for ClaimRepository."""

    def test_creates_unique_title_index(self, collection: FakeCollection, repo: ClaimRepository):
        assert "title" in collection.unique_fields

    def test_persist_then_duplicate_is_skipped(self, repo: ClaimRepository, collection: FakeCollection, verdict: Verdict):
        """Should treat a duplicate title as a no-op, not an error."""
        assert repo.persist(record_for("Same claim title here", verdict)) is True
        assert repo.persist(record_for("Same claim title here", verdict, scope=Scope.GLOBAL)) is False
        assert len(collection.docs) == 1

    def test_filter_new_is_exact_and_case_sensitive(self, repo: ClaimRepository, verdict: Verdict):
        repo.persist(record_for("Fuel price cut announced", verdict))

        claims = make_claims("Fuel price cut announced", "fuel price cut announced", "Fuel price cut announced!")
        fresh = repo.filter_new(claims)

        assert [c.title for c in fresh] == ["fuel price cut announced", "Fuel price cut announced!"]

    def test_filter_new_keeps_in_batch_duplicates(self, repo: ClaimRepository):
        claims = make_claims("Repeated claim text", "Repeated claim text")
        assert len(repo.filter_new(claims)) == 2

    def test_filter_new_empty(self, repo: ClaimRepository):
        assert repo.filter_new([]) == []

    def test_dedup_spans_scopes(self, repo: ClaimRepository, verdict: Verdict):
        repo.persist(record_for("Shared headline across scopes", verdict, scope=Scope.GLOBAL))
        assert repo.filter_new(make_claims("Shared headline across scopes")) == []

    def test_get_recent_newest_first_and_bounded(self, repo: ClaimRepository):
        seeded = seed_records(repo, Scope.LOCAL, 5)
        seed_records(repo, Scope.GLOBAL, 2)

        recent = repo.get_recent(Scope.LOCAL, limit=3)

        assert [r.title for r in recent] == [r.title for r in reversed(seeded)][:3]
        assert all(r.scope is Scope.LOCAL for r in recent)

    def test_count_by_scope(self, repo: ClaimRepository):
        seed_records(repo, Scope.LOCAL, 3)
        seed_records(repo, Scope.GLOBAL, 1)
        assert repo.count_by_scope(Scope.LOCAL) == 3
        assert repo.count_by_scope(Scope.GLOBAL) == 1

    def test_find_and_delete_by_source(self, repo: ClaimRepository, verdict: Verdict):
        repo.persist(record_for("Degraded claim one here", verdict, source="Emergency Snapshot"))
        repo.persist(record_for("Degraded claim two here", verdict, source="Emergency Snapshot"))
        repo.persist(record_for("Live claim from reddit", verdict))

        assert len(repo.find_by_source("Emergency Snapshot")) == 2
        assert repo.delete_by_source("Emergency Snapshot") == 2
        assert repo.count_by_scope(Scope.LOCAL) == 1
