"""
Result Fetcher for lead search
Translates FilterSets into people-search requests and maps the response
"""

import asyncio
import logging
import re
import time
from typing import Any, Dict, List, Optional, Tuple

import aiohttp

from .config import SearchConfig
from .exceptions import ProviderError
from .filters import FilterSet
from .models import Candidate, FetchResult, Pagination
from ..cache.provider_cache import ProviderResultCache, build_provider_cache_key

logger = logging.getLogger(__name__)

COMPANY_SIZE_MAP = {
    "1-10": "1,10",
    "11-50": "11,50",
    "51-200": "51,200",
    "201-500": "201,500",
    "501-1000": "501,1000",
    "1001-5000": "1001,5000",
    "5001-10000": "5001,10000",
    "10001+": "10001,1000000",
}

SENIORITY_MAP = {
    "Entry": ["entry"],
    "Junior": ["entry"],
    "Senior": ["senior"],
    "Manager": ["manager"],
    "Director": ["director"],
    "VP": ["vp"],
    "C-Level": ["c_suite"],
    "Owner": ["owner"],
    "Founder": ["founder"],
    "Partner": ["partner"],
}

REVENUE_MAP = {
    "$0-1M": {"min": 0, "max": 1_000_000},
    "$1M-10M": {"min": 1_000_000, "max": 10_000_000},
    "$10M-50M": {"min": 10_000_000, "max": 50_000_000},
    "$50M-100M": {"min": 50_000_000, "max": 100_000_000},
    "$100M-500M": {"min": 100_000_000, "max": 500_000_000},
    "$500M-1B": {"min": 500_000_000, "max": 1_000_000_000},
    "$1B+": {"min": 1_000_000_000},
}

EMAIL_STATUS_MAP = {
    "verified": ["verified"],
    "likely": ["likely_to_engage"],
    "guessed": ["guessed"],
    "unavailable": ["unavailable"],
}

# Lower rank sorts first
EMAIL_STATUS_RANK = {
    "verified": 0,
    "valid": 1,
    "likely_to_engage": 1,
    "likely": 1,
    "guessed": 2,
    "unavailable": 3,
}
UNKNOWN_EMAIL_RANK = 4

DOMAIN_PATTERN = re.compile(r"\.(com|io|org|net|co|ai|edu|gov)$", re.IGNORECASE)


def looks_like_domain(value: str) -> bool:
    return bool(DOMAIN_PATTERN.search(value.strip().rstrip("/")))


def normalize_domain(value: str) -> str:
    """Strip protocol, www prefix and path from a domain-like value"""
    domain = value.strip().lower()
    domain = re.sub(r"^https?://", "", domain)
    domain = re.sub(r"^www\.", "", domain)
    return domain.split("/")[0]


def build_search_payload(
    filters: FilterSet,
    page: int,
    per_page: int,
    domains: Optional[List[str]] = None,
) -> Tuple[Dict[str, Any], int]:
    """
    Translate a FilterSet into provider-native parameters

    Returns:
        Tuple of (request payload, number of filters translated)
    """
    payload: Dict[str, Any] = {"page": page, "per_page": per_page}
    applied = 0

    if filters.job_titles:
        payload["person_titles"] = filters.job_titles
        applied += 1
    if filters.locations:
        payload["person_locations"] = filters.locations
        applied += 1
    if filters.industries:
        payload["organization_industry_tags"] = filters.industries
        applied += 1
    sizes = [COMPANY_SIZE_MAP[size] for size in filters.company_sizes if size in COMPANY_SIZE_MAP]
    if sizes:
        payload["organization_num_employees_ranges"] = sizes
        applied += 1
    seniorities: List[str] = []
    for level in filters.seniorities:
        for value in SENIORITY_MAP.get(level, []):
            if value not in seniorities:
                seniorities.append(value)
    if seniorities:
        payload["person_seniorities"] = seniorities
        applied += 1
    if filters.technologies:
        payload["currently_using_any_of_technology_uids"] = filters.technologies
        applied += 1
    if filters.keywords:
        payload["q_keywords"] = " OR ".join(filters.keywords)
        applied += 1
    revenue = [REVENUE_MAP[value] for value in filters.revenue_ranges if value in REVENUE_MAP]
    if revenue:
        payload["organization_revenue_ranges"] = revenue
        applied += 1
    statuses = [mapped for status in filters.email_statuses for mapped in EMAIL_STATUS_MAP.get(status, [])]
    if statuses:
        payload["contact_email_status"] = statuses
        applied += 1
    if filters.management_levels:
        payload["person_management_levels"] = filters.management_levels
        applied += 1
    if filters.previous_companies:
        payload["person_past_company_names"] = filters.previous_companies
        applied += 1
    if filters.schools:
        payload["person_school_names"] = filters.schools
        applied += 1
    if filters.recent_job_change:
        payload["person_titles_changed_in_last_90_days"] = True
        applied += 1
    if domains:
        payload["q_organization_domains_list"] = domains
        applied += 1

    return payload, applied


def _names(values: Any) -> List[str]:
    if not isinstance(values, list):
        return []
    return [value.get("name") if isinstance(value, dict) else str(value) for value in values if value]


def map_person(person: Dict[str, Any]) -> Candidate:
    """Map a raw provider person record to a Candidate"""
    organization = person.get("organization") or {}
    first_name = person.get("first_name") or ""
    last_name = person.get("last_name") or ""
    employees = organization.get("estimated_num_employees")
    location = ", ".join(part for part in (person.get("city"), person.get("state"), person.get("country")) if part)

    return Candidate(
        id=str(person.get("id") or ""),
        first_name=first_name,
        last_name=last_name,
        name=" ".join(part for part in (first_name, last_name) if part) or "Unknown",
        email=person.get("email") or None,
        phone=person.get("phone") or None,
        title=person.get("title") or None,
        seniority=person.get("seniority") or None,
        company=organization.get("name") or None,
        company_website=organization.get("website_url") or None,
        location=location or None,
        industry=organization.get("industry") or None,
        company_size=f"{employees} employees" if employees else None,
        employee_count=employees or None,
        revenue=organization.get("annual_revenue_printed") or None,
        technologies=_names(organization.get("technologies")),
        linkedin_url=person.get("linkedin_url") or None,
        photo_url=person.get("photo_url") or None,
        email_status=person.get("email_status") or None,
        intent_topics=_names(organization.get("intent_topics")),
        keywords=[keyword for keyword in organization.get("keywords") or [] if isinstance(keyword, str)],
    )


def sort_by_email_quality(candidates: List[Candidate]) -> List[Candidate]:
    """Stable sort: verified, valid, guessed, unavailable, unknown"""
    return sorted(
        candidates,
        key=lambda candidate: EMAIL_STATUS_RANK.get((candidate.email_status or "").lower(), UNKNOWN_EMAIL_RANK),
    )


class PeopleSearchClient:
    """HTTP client for the people search provider"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.api_key = api_key if api_key is not None else SearchConfig.PROVIDER_API_KEY
        self.base_url = (base_url or SearchConfig.PROVIDER_BASE_URL).rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout or SearchConfig.PROVIDER_TIMEOUT, connect=10)
        self.session = session
        self._owns_session = session is None
        self._domain_cache: Dict[str, Optional[str]] = {}

    async def __aenter__(self):
        """Async context manager entry"""
        await self.start_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close_session()

    async def start_session(self):
        """Initialize HTTP session"""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                    "Cache-Control": "no-cache",
                },
                timeout=self.timeout,
                connector=aiohttp.TCPConnector(limit=20, limit_per_host=10),
            )
            self._owns_session = True
            logger.info("Started people search session")

    async def close_session(self):
        """Close HTTP session"""
        if self.session and self._owns_session and not self.session.closed:
            await self.session.close()
            logger.info("Closed people search session")
        self.session = None

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise ProviderError("People search API key is not configured")
        await self.start_session()

        url = f"{self.base_url}{path}"
        try:
            async with self.session.post(url, json=payload, headers={"X-Api-Key": self.api_key}) as response:
                if response.status >= 400:
                    error_text = await response.text()
                    logger.error(f"People search API error {response.status}: {error_text[:500]}")
                    raise ProviderError(
                        f"People search API error: {response.status}",
                        status_code=response.status,
                    )
                return await response.json()
        except ProviderError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"People search request to {path} failed: {e}")
            raise ProviderError(f"People search request failed: {e}") from e

    async def search_people(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Run a people search with provider-native parameters"""
        return await self._post("/mixed_people/api_search", payload)

    async def resolve_domain(self, company: str) -> Optional[str]:
        """Resolve a company name to its primary domain, or None"""
        cache_key = company.strip().lower()
        if cache_key in self._domain_cache:
            return self._domain_cache[cache_key]

        data = await self._post(
            "/mixed_companies/search",
            {"q_organization_name": company.strip(), "page": 1, "per_page": 1},
        )
        organizations = data.get("organizations") or data.get("accounts") or []
        domain = None
        if organizations:
            raw = organizations[0].get("primary_domain") or organizations[0].get("website_url")
            domain = normalize_domain(raw) if raw else None

        self._domain_cache[cache_key] = domain
        logger.info(f"Resolved company '{company}' to domain {domain}")
        return domain


class ResultFetcher:
    """Executes FilterSets against the people search provider"""

    def __init__(self, client: PeopleSearchClient, cache: Optional[ProviderResultCache] = None):
        self.client = client
        self.cache = cache

    async def fetch(
        self,
        filters: FilterSet,
        page: int = 1,
        per_page: int = 25,
        user_id: Optional[int] = None,
    ) -> FetchResult:
        """
        Fetch candidates for a filter set

        Raises:
            ProviderError: when the provider fails (never for zero results)
        """
        cache_key = build_provider_cache_key(filters, page, per_page, user_id)
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return cached

        start_time = time.time()
        domains: List[str] = []
        if filters.companies:
            domains = await self._resolve_companies(filters.companies)
            if not domains:
                logger.info(f"No domains resolved for companies {filters.companies}; returning no results")
                result = FetchResult(pagination=Pagination(page=page, per_page=per_page))
                if self.cache is not None:
                    self.cache.set(cache_key, result)
                return result

        payload, filters_applied = build_search_payload(filters, page, per_page, domains)
        logger.info(f"Searching people with {filters_applied} filters")
        data = await self.client.search_people(payload)

        candidates = sort_by_email_quality([map_person(person) for person in data.get("people") or []])
        raw_pagination = data.get("pagination") or {}
        result = FetchResult(
            candidates=candidates,
            pagination=Pagination(
                page=raw_pagination.get("page") or page,
                per_page=raw_pagination.get("per_page") or per_page,
                total_pages=raw_pagination.get("total_pages") or (1 if candidates else 0),
                total_results=raw_pagination.get("total_entries") or len(candidates),
            ),
            filters_applied=filters_applied,
            domain_filtered=bool(domains),
            resolved_domains=domains,
        )

        elapsed_ms = int((time.time() - start_time) * 1000)
        logger.info(f"People search returned {result.pagination.total_results} results in {elapsed_ms}ms")
        if self.cache is not None:
            self.cache.set(cache_key, result)
        return result

    async def _resolve_companies(self, companies: List[str]) -> List[str]:
        literal = [normalize_domain(company) for company in companies if looks_like_domain(company)]
        names = [company for company in companies if not looks_like_domain(company)]
        resolved = await asyncio.gather(*(self.client.resolve_domain(name) for name in names))

        domains: List[str] = []
        for domain in literal + [domain for domain in resolved if domain]:
            if domain not in domains:
                domains.append(domain)
        return domains
