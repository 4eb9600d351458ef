"""
Pydantic models for API responses.
Auto-generates OpenAPI documentation.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional

from models import Company


class Pagination(BaseModel):
    """Page metadata, camelCase on the wire."""
    model_config = ConfigDict(populate_by_name=True)

    current_page: int = Field(alias="currentPage")
    items_per_page: int = Field(alias="itemsPerPage")
    total_items: int = Field(alias="totalItems")
    total_pages: int = Field(alias="totalPages")


class CompaniesData(BaseModel):
    companies: List[Company]


class CompaniesResponse(BaseModel):
    """Filtered company page."""
    status: Literal["success"] = "success"
    data: CompaniesData
    pagination: Pagination


class CompanyData(BaseModel):
    company: Company


class CompanyResponse(BaseModel):
    """Single company lookup."""
    status: Literal["success"] = "success"
    data: CompanyData


class CompanyStatistics(BaseModel):
    """Aggregates over a filtered set of companies."""
    total_companies: int
    total_employees: float
    average_employees: int
    total_revenue: float
    average_revenue: int
    total_profit: float
    average_profit: int


class StatisticsData(BaseModel):
    statistics: CompanyStatistics


class StatisticsResponse(BaseModel):
    status: Literal["success"] = "success"
    data: StatisticsData


class OptionsData(BaseModel):
    values: List[str]
    count: int


class OptionsResponse(BaseModel):
    """Distinct values for a filter picker."""
    status: Literal["success"] = "success"
    data: OptionsData


class DatabaseStatsResponse(BaseModel):
    """Database statistics response."""
    total_companies: int
    total_counties: int
    total_caen_codes: int


class HealthData(BaseModel):
    service: str
    version: str
    health: str
    database_path: str
    database_stats: DatabaseStatsResponse


class HealthResponse(BaseModel):
    """API health check response."""
    status: Literal["success"] = "success"
    data: HealthData


class ErrorResponse(BaseModel):
    """JSend fail/error body."""
    status: Literal["fail", "error"]
    data: Optional[dict] = None
    message: Optional[str] = None
