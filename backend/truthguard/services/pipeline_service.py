import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional

from truthguard.core.config import (
    CLAIM_DELAY_SECONDS,
    FRESHNESS_THRESHOLD,
    PAGE_SIZE,
    PIPELINE_BATCH_SIZE,
)
from truthguard.models.claim import Claim, Scope, VerifiedRecord
from truthguard.repository.claim_repository import ClaimRepository
from truthguard.services.evidence_service import EvidenceRetriever
from truthguard.services.source_service import SourceAcquirer
from truthguard.services.verdict_service import VerdictGenerator, build_verdict_messages

logger = logging.getLogger(__name__)


class NewsVerificationPipeline:
    """
    Claim verification pipeline, one cycle per request:
    1. Fast-path: serve stored records when the scope is already populated
    2. Acquire claims from untrusted feeds (emergency snapshot as last resort)
    3. Drop claims already persisted
    4. Per claim: trusted evidence search, then model verdict
    5. Persist verdicts (duplicates skipped)
    6. Return the newest stored records for the scope

    Claims are handled one at a time with a fixed pause between them, or in
    fixed-size concurrent batches with the pause between batches. Either way
    the pause keeps the model provider under its request-rate ceiling.
    """

    def __init__(
        self,
        repo: ClaimRepository,
        acquirer: SourceAcquirer,
        retriever: EvidenceRetriever,
        generator: VerdictGenerator,
        targets: Dict[Scope, List[str]],
        freshness_threshold: int = FRESHNESS_THRESHOLD,
        page_size: int = PAGE_SIZE,
        claim_delay: float = CLAIM_DELAY_SECONDS,
        batch_size: int = PIPELINE_BATCH_SIZE,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.repo = repo
        self.acquirer = acquirer
        self.retriever = retriever
        self.generator = generator
        self.targets = targets
        self.freshness_threshold = freshness_threshold
        self.page_size = page_size
        self.claim_delay = claim_delay
        self.batch_size = max(1, batch_size)
        self.sleep = sleep

    def run(self, scope: Scope) -> List[VerifiedRecord]:
        """
        Execute one verification cycle for a scope.

        Args:
            scope (Scope): Local or Global partition

        Returns:
            List[VerifiedRecord]: Newest records for the scope
        """
        stored = self.repo.count_by_scope(scope)
        if stored > self.freshness_threshold:
            logger.info(f"[Pipeline] {scope.value}: {stored} stored records, serving fast-path")
            return self.repo.get_recent(scope, self.page_size)

        claims, source_used = self.acquirer.acquire(self.targets.get(scope, []), scope=scope)
        logger.info(f"[Pipeline] {scope.value}: {len(claims)} claims from {source_used}")

        fresh = self.repo.filter_new(claims)
        if not fresh:
            logger.info(f"[Pipeline] {scope.value}: nothing new to verify")
            return self.repo.get_recent(scope, self.page_size)

        if self.batch_size > 1:
            saved = self._process_batched(fresh, scope)
        else:
            saved = self._process_sequential(fresh, scope)
        logger.info(f"[Pipeline] {scope.value}: persisted {saved}/{len(fresh)} new records")

        return self.repo.get_recent(scope, self.page_size)

    def verify_claim(self, claim: Claim, scope: Scope) -> Optional[VerifiedRecord]:
        """
        Run evidence search and adjudication for one claim and persist it.

        Returns:
            The saved record, or None when the model gave no verdict or the
            title was stored concurrently
        """
        logger.info(f'[Pipeline] Analyzing: "{claim.title[:30]}..."')
        evidence = self.retriever.retrieve(claim.title, is_global_scope=scope is Scope.GLOBAL)

        verdict = self.generator.generate(build_verdict_messages(claim, evidence, scope))
        if verdict is None:
            logger.warning(f'[Pipeline] No verdict, skipping: "{claim.title[:30]}..."')
            return None

        record = VerifiedRecord.from_verdict(claim, verdict, evidence, scope)
        return record if self.repo.persist(record) else None

    def _safe_verify(self, claim: Claim, scope: Scope) -> Optional[VerifiedRecord]:
        try:
            return self.verify_claim(claim, scope)
        except Exception:
            logger.exception(f'[Pipeline] Failed on claim "{claim.title[:30]}...", omitting')
            return None

    def _process_sequential(self, claims: List[Claim], scope: Scope) -> int:
        saved = 0
        for index, claim in enumerate(claims):
            if self._safe_verify(claim, scope):
                saved += 1
            if index < len(claims) - 1:
                self.sleep(self.claim_delay)
        return saved

    def _process_batched(self, claims: List[Claim], scope: Scope) -> int:
        saved = 0
        with ThreadPoolExecutor(max_workers=self.batch_size) as executor:
            for start in range(0, len(claims), self.batch_size):
                batch = claims[start:start + self.batch_size]
                results = list(executor.map(lambda claim: self._safe_verify(claim, scope), batch))
                saved += sum(1 for record in results if record)
                if start + self.batch_size < len(claims):
                    self.sleep(self.claim_delay)
        return saved
