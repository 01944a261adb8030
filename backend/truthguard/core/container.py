from dataclasses import dataclass
from pymongo.collection import Collection

from truthguard.core.config import (
    GLOBAL_EMERGENCY_CLAIMS_FILE,
    GLOBAL_TARGETS,
    LOCAL_EMERGENCY_CLAIMS_FILE,
    LOCAL_TARGETS,
    load_emergency_claims,
)
from truthguard.models.claim import Scope
from truthguard.repository.claim_repository import ClaimRepository
from truthguard.services.chat_service import ChatService
from truthguard.services.evidence_service import EvidenceRetriever
from truthguard.services.pipeline_service import NewsVerificationPipeline
from truthguard.services.source_service import SourceAcquirer
from truthguard.services.verdict_service import VerdictGenerator


@dataclass
class Services:
    """Process-scoped service graph owned by the app lifespan"""
    repo: ClaimRepository
    pipeline: NewsVerificationPipeline
    chat: ChatService


def build_services(collection: Collection) -> Services:
    """
    Wire every component around a claims collection.

    Args:
        collection: MongoDB collection the repository persists to

    Returns:
        Services: Repository, pipeline and chat passthrough
    """
    repo = ClaimRepository(collection)
    generator = VerdictGenerator()
    pipeline = NewsVerificationPipeline(
        repo=repo,
        acquirer=SourceAcquirer(emergency_claims={
            Scope.LOCAL: load_emergency_claims(LOCAL_EMERGENCY_CLAIMS_FILE, Scope.LOCAL),
            Scope.GLOBAL: load_emergency_claims(GLOBAL_EMERGENCY_CLAIMS_FILE, Scope.GLOBAL),
        }),
        retriever=EvidenceRetriever(),
        generator=generator,
        targets={Scope.LOCAL: LOCAL_TARGETS, Scope.GLOBAL: GLOBAL_TARGETS},
    )
    return Services(repo=repo, pipeline=pipeline, chat=ChatService(generator))
