"""
Deterministic term expansion for query interpretation
Broad occupations, seniority adjectives, company groups and size phrases
"""

import re
from typing import Dict, List, Tuple

from .filters import INDUSTRIES

JOB_TITLE_SYNONYMS: Dict[str, List[str]] = {
    "real estate developer": ["Real Estate Developer", "Property Developer", "Land Developer", "Development Manager", "VP of Development", "Development Director"],
    "real estate agent": ["Real Estate Agent", "Realtor", "Real Estate Broker", "Broker Associate", "Listing Agent", "Buyer's Agent"],
    "real estate investor": ["Real Estate Investor", "Property Investor", "Real Estate Investment Manager", "Portfolio Manager", "Investment Director"],
    "contractor": ["General Contractor", "Contractor", "Construction Manager", "Project Manager", "Superintendent", "Owner", "President"],
    "plumber": ["Plumber", "Master Plumber", "Plumbing Contractor", "Journeyman Plumber", "Plumbing Supervisor", "Owner"],
    "electrician": ["Electrician", "Master Electrician", "Electrical Contractor", "Journeyman Electrician", "Electrical Supervisor", "Owner"],
    "hvac": ["HVAC Technician", "HVAC Contractor", "HVAC Installer", "HVAC Service Manager", "HVAC Owner", "Mechanical Contractor"],
    "roofer": ["Roofer", "Roofing Contractor", "Roofing Foreman", "Roofing Estimator", "Roofing Owner"],
    "landscaper": ["Landscaper", "Landscape Contractor", "Landscape Designer", "Grounds Manager", "Landscape Owner"],
    "lawyer": ["Attorney", "Lawyer", "Partner", "Associate", "Of Counsel", "General Counsel", "Managing Partner"],
    "attorney": ["Attorney", "Lawyer", "Partner", "Associate", "Of Counsel", "General Counsel"],
    "doctor": ["Doctor", "Physician", "MD", "Medical Director", "Chief Medical Officer", "Practice Owner"],
    "nurse": ["Nurse", "Registered Nurse", "Nurse Practitioner", "Charge Nurse", "Nurse Manager", "Director of Nursing"],
    "dentist": ["Dentist", "DDS", "DMD", "Dental Director", "Practice Owner", "Associate Dentist"],
    "accountant": ["Accountant", "CPA", "Controller", "Finance Manager", "Tax Manager", "Partner", "Staff Accountant"],
    "financial advisor": ["Financial Advisor", "Financial Planner", "Wealth Manager", "Investment Advisor", "Financial Consultant"],
    "insurance agent": ["Insurance Agent", "Insurance Broker", "Insurance Producer", "Account Executive", "Sales Agent"],
    "mortgage broker": ["Mortgage Broker", "Loan Officer", "Mortgage Loan Originator", "Mortgage Consultant", "Lending Manager"],
    "founder": ["Founder", "Co-Founder", "CEO", "Owner", "Entrepreneur", "President"],
    "startup founder": ["Founder", "Co-Founder", "CEO", "Startup CEO", "Entrepreneur"],
    "ceo": ["CEO", "Chief Executive Officer", "President", "Managing Director", "Owner"],
    "cto": ["CTO", "Chief Technology Officer", "VP Engineering", "Head of Engineering", "Technical Director"],
    "cfo": ["CFO", "Chief Financial Officer", "VP Finance", "Finance Director", "Controller"],
    "cmo": ["CMO", "Chief Marketing Officer", "VP Marketing", "Head of Marketing", "Marketing Director"],
    "sales manager": ["Sales Manager", "Sales Director", "VP Sales", "Head of Sales", "Business Development Manager"],
    "marketing manager": ["Marketing Manager", "Marketing Director", "VP Marketing", "Head of Marketing", "Growth Manager"],
    "hr manager": ["HR Manager", "Human Resources Manager", "HR Director", "VP HR", "Head of HR", "People Operations Manager"],
    "software engineer": ["Software Engineer", "Software Developer", "Full Stack Developer", "Backend Developer", "Frontend Developer"],
    "product manager": ["Product Manager", "Product Director", "VP Product", "Head of Product", "Senior Product Manager"],
    "restaurant owner": ["Restaurant Owner", "Restaurateur", "Owner", "General Manager", "Managing Partner"],
    "gym owner": ["Gym Owner", "Fitness Center Owner", "Owner", "General Manager", "Fitness Director"],
    "chiropractor": ["Chiropractor", "Chiropractic Physician", "Practice Owner"],
    "veterinarian": ["Veterinarian", "DVM", "Veterinary Director", "Practice Owner"],
    "architect": ["Architect", "Principal Architect", "Design Director", "Partner", "Owner", "Senior Architect"],
    "recruiter": ["Recruiter", "Talent Acquisition", "Executive Recruiter", "Recruiting Manager"],
    "property manager": ["Property Manager", "Community Manager", "Asset Manager", "Regional Manager"],
    "home builder": ["Home Builder", "Custom Home Builder", "Residential Builder", "Builder", "Construction Manager", "Owner"],
}

SENIORITY_INDICATORS: Dict[str, List[str]] = {
    "entry": ["Entry", "Junior"],
    "junior": ["Entry", "Junior"],
    "mid": ["Senior"],
    "senior": ["Senior", "Manager"],
    "executive": ["VP", "C-Level"],
    "c-suite": ["C-Level"],
    "decision maker": ["Manager", "Director", "VP", "C-Level", "Owner", "Founder"],
    "leadership": ["Manager", "Director", "VP", "C-Level", "Owner"],
}

COMPANY_GROUPS: Dict[str, List[str]] = {
    "faang": ["Meta", "Apple", "Amazon", "Netflix", "Google"],
    "maang": ["Meta", "Apple", "Amazon", "Netflix", "Google"],
    "magnificent seven": ["Apple", "Microsoft", "Alphabet", "Amazon", "Nvidia", "Meta", "Tesla"],
    "big four": ["Deloitte", "PwC", "EY", "KPMG"],
    "big three": ["McKinsey", "Boston Consulting Group", "Bain & Company"],
    "mbb": ["McKinsey", "Boston Consulting Group", "Bain & Company"],
}

COMPANY_SIZE_MAPPINGS: Dict[str, List[str]] = {
    "startup": ["1-10", "11-50"],
    "small business": ["1-10", "11-50"],
    "small": ["1-10", "11-50", "51-200"],
    "smb": ["11-50", "51-200", "201-500"],
    "mid-size": ["201-500", "501-1000"],
    "medium": ["201-500", "501-1000"],
    "large": ["1001-5000", "5001-10000"],
    "enterprise": ["1001-5000", "5001-10000", "10001+"],
    "fortune 500": ["5001-10000", "10001+"],
}

INDUSTRY_MAPPINGS: Dict[str, List[str]] = {
    "real estate": ["Real Estate", "Commercial Real Estate", "Residential Real Estate"],
    "construction": ["Construction", "Building Materials", "Civil Engineering"],
    "legal": ["Law Practice", "Legal Services"],
    "law": ["Law Practice", "Legal Services"],
    "healthcare": ["Hospital & Health Care", "Medical Practice", "Health, Wellness and Fitness"],
    "medical": ["Hospital & Health Care", "Medical Practice"],
    "technology": ["Information Technology and Services", "Computer Software", "Internet"],
    "tech": ["Information Technology and Services", "Computer Software", "Internet"],
    "software": ["Computer Software", "Information Technology and Services"],
    "saas": ["Computer Software", "Internet"],
    "finance": ["Financial Services", "Banking", "Investment Banking", "Investment Management"],
    "fintech": ["Financial Services", "Computer Software"],
    "restaurant": ["Restaurants", "Food & Beverages", "Hospitality"],
    "hospitality": ["Hospitality", "Hotels", "Restaurants"],
    "retail": ["Retail", "Consumer Goods"],
    "manufacturing": ["Manufacturing", "Industrial Automation"],
    "education": ["Education Management", "Higher Education", "Primary/Secondary Education"],
    "nonprofit": ["Non-Profit Organization Management", "Civic & Social Organization"],
    "marketing": ["Marketing and Advertising", "Public Relations and Communications"],
    "consulting": ["Management Consulting", "Business Consulting", "Strategy Consulting"],
    "logistics": ["Logistics and Supply Chain", "Transportation/Trucking/Railroad"],
    "energy": ["Oil & Energy", "Renewables & Environment", "Utilities"],
    "biotech": ["Biotechnology"],
    "pharma": ["Pharmaceuticals"],
    "venture capital": ["Venture Capital & Private Equity"],
    "private equity": ["Venture Capital & Private Equity"],
}

COMMON_MISSPELLINGS: Dict[str, str] = {
    "marketting": "marketing",
    "managment": "management",
    "developper": "developer",
    "engineeer": "engineer",
    "engeneer": "engineer",
    "enginer": "engineer",
    "directore": "director",
    "presidant": "president",
    "excecutive": "executive",
    "exectuive": "executive",
    "assistent": "assistant",
    "asistant": "assistant",
    "accountent": "accountant",
    "acountant": "accountant",
    "analust": "analyst",
    "analist": "analyst",
    "architech": "architect",
    "architecht": "architect",
    "consulant": "consultant",
    "consultent": "consultant",
    "cordinator": "coordinator",
    "coodinator": "coordinator",
    "realestate": "real estate",
    "realstate": "real estate",
    "sofware": "software",
    "softwar": "software",
    "tecnology": "technology",
    "techonology": "technology",
    "finace": "finance",
    "finanace": "finance",
    "insurence": "insurance",
    "insuranse": "insurance",
    "resturant": "restaurant",
    "restraunt": "restaurant",
    "restarant": "restaurant",
    "heathcare": "healthcare",
    "healthcar": "healthcare",
    "helthcare": "healthcare",
    "constraction": "construction",
    "contruction": "construction",
    "plumer": "plumber",
    "plummer": "plumber",
    "electrian": "electrician",
    "electrican": "electrician",
    "attorny": "attorney",
    "attourney": "attorney",
    "laywer": "lawyer",
    "lawer": "lawyer",
    "vetrinarian": "veterinarian",
    "veternarian": "veterinarian",
    "pharmasist": "pharmacist",
    "farmacist": "pharmacist",
    "terapist": "therapist",
    "therapiest": "therapist",
    "recuiter": "recruiter",
    "recruter": "recruiter",
    "entrpreneur": "entrepreneur",
    "entreprenur": "entrepreneur",
    "enterpreneur": "entrepreneur",
    "startp": "startup",
}

# Leading request phrases, longest first
NOISE_PHRASES: List[str] = [
    "i'm looking for", "im looking for", "can you find", "help me find", "please find",
    "looking for", "search for", "find me", "show me", "get me",
    "i need", "i want", "we need", "we want", "look for",
    "locate", "search", "find",
]

_CANONICAL_INDUSTRIES = {industry.lower(): industry for industry in INDUSTRIES}


def _normalize(term: str) -> str:
    return re.sub(r"\s+", " ", term.strip().lower())


def _contains_phrase(text: str, phrase: str) -> bool:
    return re.search(rf"\b{re.escape(phrase)}\b", text) is not None


def _correct_word(word: str) -> str:
    core, trailing = re.match(r"^(.*?)([.,!?;:]*)$", word).groups()
    lowered = core.lower()
    if lowered in COMMON_MISSPELLINGS:
        return COMMON_MISSPELLINGS[lowered] + trailing
    if lowered.endswith("s") and lowered[:-1] in COMMON_MISSPELLINGS:
        return COMMON_MISSPELLINGS[lowered[:-1]] + "s" + trailing
    return word


def correct_spelling(text: str) -> str:
    """Fix common misspellings word by word, keeping plural endings"""
    return " ".join(_correct_word(word) for word in text.split())


def preprocess_query(query: str) -> Tuple[str, List[str]]:
    """
    Clean a raw query before extraction

    Collapses whitespace, strips leading request phrases ("find me",
    "looking for") and fixes common misspellings. Returns the cleaned
    query and the corrections made, as "wrong -> right" strings.
    """
    cleaned = re.sub(r"\s+", " ", query).strip()

    for phrase in NOISE_PHRASES:
        stripped = re.sub(rf"^{re.escape(phrase)}\s+", "", cleaned, flags=re.IGNORECASE)
        if stripped:
            cleaned = stripped

    corrections = []
    words = []
    for word in cleaned.split(" "):
        corrected = _correct_word(word)
        if corrected != word:
            corrections.append(f"{word} -> {corrected}")
        words.append(corrected)

    return " ".join(words), corrections


def expand_job_title(title: str) -> List[str]:
    """Expand a broad occupation into concrete title variants; specific titles pass through"""
    normalized = _normalize(correct_spelling(title))
    expansions = JOB_TITLE_SYNONYMS.get(normalized)
    if expansions:
        return list(expansions)
    # Plural forms ("plumbers", "attorneys")
    if normalized.endswith("s") and normalized[:-1] in JOB_TITLE_SYNONYMS:
        return list(JOB_TITLE_SYNONYMS[normalized[:-1]])
    return [title.strip()]


def expand_seniority(term: str) -> List[str]:
    """Map a seniority adjective to ordered seniority tiers, or [] when unknown"""
    normalized = _normalize(term)
    for key, levels in SENIORITY_INDICATORS.items():
        if _contains_phrase(normalized, key):
            return list(levels)
    return []


def expand_company_group(name: str) -> List[str]:
    """Expand a company-group nickname ("FAANG") into its constituent companies"""
    group = COMPANY_GROUPS.get(_normalize(name))
    return list(group) if group else [name.strip()]


def expand_company_size(term: str) -> List[str]:
    """Map a size phrase ("startup") to company size buckets, or [] when unknown"""
    normalized = _normalize(term)
    for key, ranges in COMPANY_SIZE_MAPPINGS.items():
        if _contains_phrase(normalized, key):
            return list(ranges)
    return []


def map_industry(term: str) -> List[str]:
    """Resolve an industry term to canonical industries, or [] when unknown"""
    normalized = _normalize(term)
    if normalized in _CANONICAL_INDUSTRIES:
        return [_CANONICAL_INDUSTRIES[normalized]]
    mapped = INDUSTRY_MAPPINGS.get(normalized)
    return list(mapped) if mapped else []
