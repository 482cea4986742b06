"""
Query extraction backends
Turn free text into a raw classification + filter payload
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from openai import AsyncOpenAI

from .config import SearchConfig
from .exceptions import ExtractionError
from .filters import COMPANY_SIZES, SENIORITY_LEVELS, REVENUE_RANGES, EMAIL_STATUSES, INDUSTRIES

logger = logging.getLogger(__name__)


class QueryExtractor(ABC):
    """Extracts a classification and raw filters from a search query"""

    @abstractmethod
    async def extract(self, query: str) -> Dict[str, Any]:
        """
        Extract structured search intent

        Returns:
            Dict with "classification", "filters", "confidence" and "explanation"

        Raises:
            ExtractionError: when the backend fails or returns unusable output
        """
        pass


def build_extraction_prompt() -> str:
    """System prompt listing the option sets the extraction must stay within"""
    return f"""You convert lead search requests into structured filters for a B2B people search.

Return ONLY a JSON object with this shape:
{{
  "classification": {{
    "intent": "find_leads",
    "specificity": "high" | "medium" | "low",
    "hasRoleInfo": bool,
    "hasLocationInfo": bool,
    "hasCompanyInfo": bool,
    "hasIndustryInfo": bool,
    "suggestedClarifications": [string]
  }},
  "filters": {{
    "jobTitles": [string],
    "locations": [string],
    "industries": [string],
    "companySizes": [string],
    "companies": [string],
    "seniorities": [string],
    "technologies": [string],
    "keywords": [string],
    "revenueRanges": [string],
    "intentTopics": [string],
    "emailStatuses": [string],
    "managementLevels": [string],
    "previousCompanies": [string],
    "schools": [string],
    "recentJobChange": bool
  }},
  "confidence": number between 0 and 1,
  "explanation": string
}}

RULES:
1. Only extract what the query states or clearly implies. Use empty arrays otherwise.
2. Broad occupations become several concrete job titles, including ownership titles
   (e.g. "plumbers" -> "Plumber", "Master Plumber", "Plumbing Contractor", "Owner").
3. companySizes must be drawn from: {", ".join(COMPANY_SIZES)}
4. seniorities must be drawn from: {", ".join(SENIORITY_LEVELS)}
5. revenueRanges must be drawn from: {", ".join(REVENUE_RANGES)}
6. emailStatuses must be drawn from: {", ".join(EMAIL_STATUSES)}
7. industries must be drawn from: {", ".join(INDUSTRIES)}
8. Company group nicknames are expanded (FAANG -> Meta, Apple, Amazon, Netflix, Google).
9. Set specificity "low" when there is no role, company, industry or location.

EXAMPLES:

Input: "VP of Sales in Austin"
Output: {{"classification": {{"intent": "find_leads", "specificity": "high", "hasRoleInfo": true, "hasLocationInfo": true, "hasCompanyInfo": false, "hasIndustryInfo": false, "suggestedClarifications": []}}, "filters": {{"jobTitles": ["VP of Sales", "Vice President of Sales", "VP Sales"], "locations": ["Austin, Texas"], "seniorities": ["VP"]}}, "confidence": 0.9, "explanation": "Sales vice presidents located in Austin, Texas"}}

Input: "engineers at FAANG companies"
Output: {{"classification": {{"intent": "find_leads", "specificity": "high", "hasRoleInfo": true, "hasLocationInfo": false, "hasCompanyInfo": true, "hasIndustryInfo": false, "suggestedClarifications": []}}, "filters": {{"jobTitles": ["Software Engineer", "Engineer"], "companies": ["Meta", "Apple", "Amazon", "Netflix", "Google"]}}, "confidence": 0.85, "explanation": "Engineers working at Meta, Apple, Amazon, Netflix or Google"}}

Input: "people"
Output: {{"classification": {{"intent": "find_leads", "specificity": "low", "hasRoleInfo": false, "hasLocationInfo": false, "hasCompanyInfo": false, "hasIndustryInfo": false, "suggestedClarifications": ["What role or job title are you looking for?", "Which location should we focus on?"]}}, "filters": {{}}, "confidence": 0.2, "explanation": "No searchable criteria found"}}"""


class OpenAIQueryExtractor(QueryExtractor):
    """Query extraction using an OpenAI chat completion in JSON mode"""

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: Optional[str] = None):
        self.client = client or AsyncOpenAI(
            api_key=SearchConfig.OPENAI_API_KEY,
            timeout=SearchConfig.OPENAI_TIMEOUT,
        )
        self.model = model or SearchConfig.OPENAI_MODEL
        self.system_prompt = build_extraction_prompt()

    async def extract(self, query: str) -> Dict[str, Any]:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self.system_prompt},
                    {"role": "user", "content": query},
                ],
                response_format={"type": "json_object"},
                temperature=0,
            )
        except Exception as e:
            logger.error(f"OpenAI extraction failed: {e}")
            raise ExtractionError(f"Extraction call failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ExtractionError("Extraction returned an empty response")

        try:
            payload = json.loads(content)
        except json.JSONDecodeError as e:
            raise ExtractionError(f"Extraction returned invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise ExtractionError("Extraction returned a non-object payload")
        return payload
