from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional

from ..search.models import SearchOptions

class SearchOptionsRequest(BaseModel):
    """Pagination and scoring options shared by search requests"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: Optional[int] = Field(None, ge=1)
    per_page: Optional[int] = Field(None, ge=1, le=100)
    use_icp_scoring: Optional[bool] = None

    def to_options(self) -> SearchOptions:
        return SearchOptions(page=self.page, per_page=self.per_page, use_icp_scoring=self.use_icp_scoring)

class SearchRequest(SearchOptionsRequest):
    query: str = Field(..., min_length=1, max_length=500)

    @field_validator('query')
    @classmethod
    def validate_query(cls, v):
        if not v.strip():
            raise ValueError('Query must not be blank')
        return v

class RefineRequest(SearchOptionsRequest):
    session_id: int
    command: str = Field(..., min_length=1, max_length=500)

    @field_validator('command')
    @classmethod
    def validate_command(cls, v):
        if not v.strip():
            raise ValueError('Refinement command must not be blank')
        return v
