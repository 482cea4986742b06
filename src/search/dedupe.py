"""
Candidate deduplication
"""

from typing import List, Sequence, TypeVar

from .models import Candidate

CandidateT = TypeVar("CandidateT", bound=Candidate)


def dedupe_key(candidate: Candidate) -> str:
    """Lowercased email when present, otherwise the provider record id"""
    if candidate.email and candidate.email.strip():
        return f"email:{candidate.email.strip().lower()}"
    return f"id:{candidate.id}"


def dedupe_candidates(candidates: Sequence[CandidateT]) -> List[CandidateT]:
    """Collapse candidates sharing a key; the first one seen wins and order is kept"""
    seen = set()
    unique: List[CandidateT] = []
    for candidate in candidates:
        key = dedupe_key(candidate)
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return unique
