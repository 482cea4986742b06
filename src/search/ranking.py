"""
Lead ranking for the search pipeline
Filter relevance plus learned ideal-customer-profile (ICP) scoring
"""

import logging
import re
from typing import Dict, List, Optional, Sequence, Tuple

from .config import SearchConfig
from .filters import FilterSet, company_size_bucket
from .models import Candidate, ScoredLead
from ..models.icp import IcpProfile, PreferenceWeight

logger = logging.getLogger(__name__)

# Title words that indicate each seniority tier
SENIORITY_TITLE_WORDS = {
    "Entry": ["assistant", "associate", "intern", "coordinator"],
    "Junior": ["junior", "jr"],
    "Senior": ["senior", "sr", "lead", "principal"],
    "Manager": ["manager", "supervisor"],
    "Director": ["director", "head of"],
    "VP": ["vp", "vice president"],
    "C-Level": ["chief", "ceo", "cto", "cfo", "coo", "cmo", "president"],
    "Owner": ["owner"],
    "Founder": ["founder", "co-founder"],
    "Partner": ["partner"],
}


def _words(text: str) -> List[str]:
    return [word for word in re.split(r"[^a-z0-9]+", text.lower()) if word]


class RelevanceRanker:
    """Scores how well a candidate matches the search filters"""

    def __init__(self, weights: Optional[Dict[str, float]] = None):
        self.weights = weights or {
            "title": 0.35,
            "location": 0.15,
            "industry": 0.15,
            "seniority": 0.10,
            "contact_quality": 0.10,
        }
        self.total_weight = sum(self.weights.values())

    def calculate_relevance_score(self, candidate: Candidate, filters: FilterSet) -> Tuple[float, List[str]]:
        """
        Calculate filter relevance for a candidate

        Returns:
            Tuple of (score in [0, 1], match_reasons)
        """
        score = 0.0
        reasons: List[str] = []

        for key, calculate in (
            ("title", self._calculate_title_score),
            ("location", self._calculate_location_score),
            ("industry", self._calculate_industry_score),
            ("seniority", self._calculate_seniority_score),
        ):
            part_score, part_reasons = calculate(candidate, filters)
            score += part_score * self.weights.get(key, 0.0)
            reasons.extend(part_reasons)

        quality = self._calculate_contact_quality(candidate)
        score += quality * self.weights.get("contact_quality", 0.0)

        return min(score / self.total_weight, 1.0), reasons

    def _calculate_title_score(self, candidate: Candidate, filters: FilterSet) -> Tuple[float, List[str]]:
        if not filters.job_titles:
            return 0.5, []
        if not candidate.title:
            return 0.0, []

        title = candidate.title.lower()
        title_words = set(_words(title))
        best = 0.3
        for wanted in filters.job_titles:
            wanted_lower = wanted.lower()
            if title == wanted_lower:
                return 1.0, [f"Exact title match: {candidate.title}"]
            if wanted_lower in title or title in wanted_lower:
                best = max(best, 0.8)
                continue
            wanted_words = set(_words(wanted_lower))
            if wanted_words and title_words & wanted_words:
                overlap = len(title_words & wanted_words) / len(wanted_words)
                best = max(best, 0.3 + 0.4 * overlap)

        reasons = [f"Similar title: {candidate.title}"] if best >= 0.8 else []
        return best, reasons

    def _calculate_location_score(self, candidate: Candidate, filters: FilterSet) -> Tuple[float, List[str]]:
        if not filters.locations:
            return 0.5, []
        if not candidate.location:
            return 0.0, []

        location = candidate.location.lower()
        for wanted in filters.locations:
            wanted_lower = wanted.lower()
            if wanted_lower in location:
                return 1.0, [f"Location match: {candidate.location}"]
            parts = [part.strip() for part in wanted_lower.split(",") if part.strip()]
            if any(part in location for part in parts):
                return 0.7, [f"Nearby location: {candidate.location}"]
        return 0.0, []

    def _calculate_industry_score(self, candidate: Candidate, filters: FilterSet) -> Tuple[float, List[str]]:
        if not filters.industries:
            return 0.5, []
        if not candidate.industry:
            return 0.0, []

        industry = candidate.industry.lower()
        for wanted in filters.industries:
            if industry == wanted.lower():
                return 1.0, [f"Industry match: {candidate.industry}"]
            if wanted.lower() in industry or industry in wanted.lower():
                return 0.7, [f"Related industry: {candidate.industry}"]
        return 0.0, []

    def _calculate_seniority_score(self, candidate: Candidate, filters: FilterSet) -> Tuple[float, List[str]]:
        if not filters.seniorities:
            return 0.5, []

        seniority = (candidate.seniority or "").lower()
        title = f" {' '.join(_words(candidate.title or ''))} "
        for level in filters.seniorities:
            if seniority and seniority.replace("_", "-") in (level.lower(), level.lower().replace("-", "_")):
                return 1.0, [f"Seniority match: {level}"]
            if any(f" {word} " in title for word in SENIORITY_TITLE_WORDS.get(level, [])):
                return 0.9, [f"Seniority match: {level}"]
        return 0.2, []

    def _calculate_contact_quality(self, candidate: Candidate) -> float:
        score = 0.0
        if candidate.email:
            score += 0.4
        if candidate.phone:
            score += 0.2
        if candidate.linkedin_url:
            score += 0.2
        if candidate.company:
            score += 0.1
        if candidate.title:
            score += 0.1
        return score


class IcpScorer:
    """Scores candidates against a learned ideal customer profile"""

    def __init__(self, ranker: Optional[RelevanceRanker] = None):
        self.ranker = ranker or RelevanceRanker()
        self.attribute_weights = {
            "title": 0.4,
            "industry": 0.25,
            "company_size": 0.15,
            "location": 0.2,
        }

    def is_enabled(self, profile: Optional[IcpProfile]) -> bool:
        return profile is not None and profile.icp_confidence >= SearchConfig.ICP_MIN_CONFIDENCE

    def score(
        self,
        profile: Optional[IcpProfile],
        candidates: Sequence[Candidate],
        filters: Optional[FilterSet] = None,
    ) -> List[ScoredLead]:
        """
        Score and rank candidates

        Below the confidence threshold every candidate gets the neutral score,
        no reasons, and keeps its original order.
        """
        if not self.is_enabled(profile):
            neutral = SearchConfig.NEUTRAL_SCORE
            return [
                ScoredLead(**{
                    **candidate.model_dump(),
                    "icp_score": neutral,
                    "overall_score": neutral,
                    "match_reasons": [],
                    "unmatch_reasons": [],
                })
                for candidate in candidates
            ]

        filters = filters or FilterSet()
        scored = []
        for candidate in candidates:
            icp_score, matches, unmatches = self.calculate_icp_score(profile, candidate)
            relevance, relevance_reasons = self.ranker.calculate_relevance_score(candidate, filters)
            overall = round(0.6 * icp_score + 0.4 * relevance * 100)
            scored.append(ScoredLead(**{
                **candidate.model_dump(),
                "icp_score": icp_score,
                "overall_score": max(0, min(100, overall)),
                "match_reasons": matches + relevance_reasons,
                "unmatch_reasons": unmatches,
            }))

        # Stable sort keeps the provider's email-quality order for ties
        scored.sort(key=lambda lead: lead.overall_score, reverse=True)
        return scored

    def calculate_icp_score(self, profile: IcpProfile, candidate: Candidate) -> Tuple[int, List[str], List[str]]:
        """
        Weighted attribute match against the profile's preference lists

        Returns:
            Tuple of (icp_score 0-100, match_reasons, unmatch_reasons)
        """
        attributes = [
            ("title", "Title", candidate.title, profile.title_preferences, self._title_matches),
            ("industry", "Industry", candidate.industry, profile.industry_preferences, self._exact_matches),
            ("company_size", "Company size", company_size_bucket(candidate.employee_count),
             profile.company_size_preferences, self._exact_matches),
            ("location", "Location", candidate.location, profile.location_preferences, self._location_matches),
        ]

        weighted_total = 0.0
        weight_used = 0.0
        matches: List[str] = []
        unmatches: List[str] = []

        for key, label, value, preferences, matcher in attributes:
            if not value or not preferences:
                continue

            weight = self.attribute_weights[key]
            preference = self._best_preference(value, preferences, matcher)
            if preference is None:
                if any(p.weight > 0 for p in preferences):
                    unmatches.append(f"{label} '{value}' is not among your best-performing {label.lower()}s")
                    weighted_total += 35 * weight
                    weight_used += weight
                continue

            attribute_score = 50 + 50 * max(-1.0, min(1.0, preference.weight))
            weighted_total += attribute_score * weight
            weight_used += weight
            if preference.weight > 0:
                matches.append(f"{label} '{value}' matches leads that engaged with you ({preference.value})")
            elif preference.weight < 0:
                unmatches.append(f"{label} '{value}' has performed poorly in your outreach")

        if weight_used == 0:
            return SearchConfig.NEUTRAL_SCORE, matches, unmatches

        icp_score = round(weighted_total / weight_used)
        return max(0, min(100, icp_score)), matches, unmatches

    def _best_preference(self, value, preferences: List[PreferenceWeight], matcher) -> Optional[PreferenceWeight]:
        matched = [preference for preference in preferences if matcher(value, preference.value)]
        if not matched:
            return None
        return max(matched, key=lambda preference: abs(preference.weight))

    @staticmethod
    def _exact_matches(value: str, preferred: str) -> bool:
        return value.strip().lower() == preferred.strip().lower()

    @staticmethod
    def _title_matches(value: str, preferred: str) -> bool:
        value_lower = value.lower()
        preferred_lower = preferred.lower()
        return preferred_lower in value_lower or value_lower in preferred_lower

    @staticmethod
    def _location_matches(value: str, preferred: str) -> bool:
        value_lower = value.lower()
        preferred_lower = preferred.lower()
        if preferred_lower in value_lower or value_lower in preferred_lower:
            return True
        city = preferred_lower.split(",")[0].strip()
        return bool(city) and city in value_lower
