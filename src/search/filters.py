"""
Filter schema for lead search
Canonical option lists, the FilterSet model and per-field merge logic
"""

import re
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

COMPANY_SIZES = [
    "1-10", "11-50", "51-200", "201-500", "501-1000",
    "1001-5000", "5001-10000", "10001+",
]

# Ordered from most junior to most senior
SENIORITY_LEVELS = [
    "Entry", "Junior", "Senior", "Manager", "Director",
    "VP", "C-Level", "Owner", "Founder", "Partner",
]

REVENUE_RANGES = [
    "$0-1M", "$1M-10M", "$10M-50M", "$50M-100M",
    "$100M-500M", "$500M-1B", "$1B+",
]

EMAIL_STATUSES = ["verified", "likely", "guessed", "unavailable"]

INDUSTRIES = [
    "Accounting",
    "Agriculture",
    "Architecture & Planning",
    "Automotive",
    "Banking",
    "Biotechnology",
    "Broadcast Media",
    "Building Materials",
    "Business Consulting",
    "Civic & Social Organization",
    "Civil Engineering",
    "Commercial Real Estate",
    "Computer Software",
    "Construction",
    "Consumer Goods",
    "Consumer Services",
    "Cosmetics",
    "Design",
    "Education Management",
    "Entertainment",
    "Farming",
    "Financial Services",
    "Food & Beverages",
    "Government Administration",
    "Government Relations",
    "Graphic Design",
    "Health, Wellness and Fitness",
    "Higher Education",
    "Hospital & Health Care",
    "Hospitality",
    "Hotels",
    "Industrial Automation",
    "Information Technology and Services",
    "Insurance",
    "Interior Design",
    "Internet",
    "Investment Banking",
    "Investment Management",
    "Law Practice",
    "Legal Services",
    "Logistics and Supply Chain",
    "Management Consulting",
    "Manufacturing",
    "Marketing and Advertising",
    "Media Production",
    "Medical Practice",
    "Motor Vehicle Manufacturing",
    "Non-Profit Organization Management",
    "Oil & Energy",
    "Online Media",
    "Pharmaceuticals",
    "Primary/Secondary Education",
    "Public Relations and Communications",
    "Real Estate",
    "Renewables & Environment",
    "Residential Real Estate",
    "Restaurants",
    "Retail",
    "Sports",
    "Strategy Consulting",
    "Telecommunications",
    "Transportation/Trucking/Railroad",
    "Utilities",
    "Venture Capital & Private Equity",
]

# Fields holding lists of strings, in display order
LIST_FIELDS = [
    "job_titles",
    "locations",
    "industries",
    "company_sizes",
    "companies",
    "seniorities",
    "technologies",
    "keywords",
    "revenue_ranges",
    "intent_topics",
    "email_statuses",
    "management_levels",
    "previous_companies",
    "schools",
]


# Upper bounds of the canonical company size buckets
SIZE_BUCKETS = [
    (10, "1-10"),
    (50, "11-50"),
    (200, "51-200"),
    (500, "201-500"),
    (1000, "501-1000"),
    (5000, "1001-5000"),
    (10000, "5001-10000"),
]


def company_size_bucket(employee_count: Optional[int]) -> Optional[str]:
    """Canonical size bucket for an employee count"""
    if employee_count is None or employee_count <= 0:
        return None
    for upper, bucket in SIZE_BUCKETS:
        if employee_count <= upper:
            return bucket
    return "10001+"


def normalize_company_size(value: str) -> Optional[str]:
    """
    Map a size bucket or an employee count ("45", "1,200 employees") to its
    canonical bucket; None when the value is neither
    """
    text = value.strip()
    if text in COMPANY_SIZES:
        return text
    match = re.fullmatch(r"(\d[\d,]*)\s*(?:employees?)?", text.lower())
    if not match:
        return None
    return company_size_bucket(int(match.group(1).replace(",", "")))


class FilterSet(BaseModel):
    """Structured representation of a lead search intent"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    job_titles: List[str] = []
    locations: List[str] = []
    industries: List[str] = []
    company_sizes: List[str] = []
    companies: List[str] = []
    seniorities: List[str] = []
    technologies: List[str] = []
    keywords: List[str] = []
    revenue_ranges: List[str] = []
    intent_topics: List[str] = []

    # Precision filters
    email_statuses: List[str] = []
    management_levels: List[str] = []
    previous_companies: List[str] = []
    schools: List[str] = []
    recent_job_change: bool = False

    def active_filter_count(self) -> int:
        """Number of fields that constrain the search"""
        count = sum(1 for field in LIST_FIELDS if getattr(self, field))
        if self.recent_job_change:
            count += 1
        return count

    def is_empty(self) -> bool:
        return self.active_filter_count() == 0

    def to_cache_dict(self) -> Dict[str, object]:
        """Normalized form used for cache keys: sorted, lowercased values"""
        data: Dict[str, object] = {
            field: sorted(value.strip().lower() for value in getattr(self, field))
            for field in LIST_FIELDS
            if getattr(self, field)
        }
        if self.recent_job_change:
            data["recent_job_change"] = True
        return data


def union_values(existing: Iterable[str], additions: Iterable[str]) -> List[str]:
    """Order-preserving union; values equal ignoring case collapse to the first seen"""
    merged: List[str] = []
    seen = set()
    for value in list(existing) + list(additions):
        key = value.strip().lower()
        if not key or key in seen:
            continue
        seen.add(key)
        merged.append(value.strip())
    return merged


def merge_filters(base: FilterSet, addition: FilterSet) -> FilterSet:
    """Union two filter sets field by field; no field is ever replaced"""
    return FilterSet(
        job_titles=union_values(base.job_titles, addition.job_titles),
        locations=union_values(base.locations, addition.locations),
        industries=union_values(base.industries, addition.industries),
        company_sizes=union_values(base.company_sizes, addition.company_sizes),
        companies=union_values(base.companies, addition.companies),
        seniorities=union_values(base.seniorities, addition.seniorities),
        technologies=union_values(base.technologies, addition.technologies),
        keywords=union_values(base.keywords, addition.keywords),
        revenue_ranges=union_values(base.revenue_ranges, addition.revenue_ranges),
        intent_topics=union_values(base.intent_topics, addition.intent_topics),
        email_statuses=union_values(base.email_statuses, addition.email_statuses),
        management_levels=union_values(base.management_levels, addition.management_levels),
        previous_companies=union_values(base.previous_companies, addition.previous_companies),
        schools=union_values(base.schools, addition.schools),
        recent_job_change=base.recent_job_change or addition.recent_job_change,
    )


def describe_filters(filters: FilterSet) -> str:
    """Short human readable summary of the active filters"""
    parts = []
    if filters.job_titles:
        titles = ", ".join(filters.job_titles[:3])
        if len(filters.job_titles) > 3:
            titles += "..."
        parts.append(f"Titles: {titles}")
    if filters.locations:
        parts.append(f"Locations: {', '.join(filters.locations)}")
    if filters.industries:
        parts.append(f"Industries: {', '.join(filters.industries)}")
    if filters.company_sizes:
        parts.append(f"Sizes: {', '.join(filters.company_sizes)}")
    if filters.seniorities:
        parts.append(f"Seniorities: {', '.join(filters.seniorities)}")
    if filters.companies:
        parts.append(f"Companies: {', '.join(filters.companies)}")
    return " | ".join(parts) or "No filters applied"
