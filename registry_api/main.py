"""
FastAPI application for the company registry API.

Serves filtered, paginated company listings and aggregate statistics to the
dashboard, with auto-generated OpenAPI documentation at /docs.
"""

import logging
import math
import time
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from models import MULTI_VALUE_FILTERS, CompanyFilters, SortOrder
from .config import settings
from .data_access import CompanyDataProvider
from .errors import BadRequestError, HttpError, register_handlers
from .models import (
    CompaniesData,
    CompaniesResponse,
    CompanyData,
    CompanyResponse,
    CompanyStatistics,
    DatabaseStatsResponse,
    ErrorResponse,
    HealthData,
    HealthResponse,
    OptionsData,
    OptionsResponse,
    Pagination,
    StatisticsData,
    StatisticsResponse,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)
access_logger = logging.getLogger("registry_api.access")

# Initialize FastAPI app
app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=settings.CORS_METHODS,
    allow_headers=["*"],
)

register_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """One access line per request: addr, status, method, url, latency."""
    start = time.perf_counter()
    # Anything escaping call_next is answered 500 by the catch-all handler
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        client = request.client.host if request.client else "-"
        access_logger.info(
            f"{client} {status_code} {request.method} {request.url} - {elapsed_ms:.3f} ms"
        )


# ----------------------------------------------------------------
# Dependencies
# ----------------------------------------------------------------

_data: Optional[CompanyDataProvider] = None


def get_data() -> CompanyDataProvider:
    """Shared read-only provider, opened on first use."""
    global _data
    if _data is None:
        _data = CompanyDataProvider()
        logger.info(f"Connected to database: {_data.db_path}")
    return _data


def get_filters(request: Request) -> CompanyFilters:
    """
    Collect filter criteria from the query string.

    Multi-value criteria accept repeated parameters (``judet=Cluj&judet=Iasi``)
    as well as comma-separated values (``caen=6201,6202``).
    """
    raw = {}
    for key in CompanyFilters.model_fields:
        values = request.query_params.getlist(key)
        if not values:
            continue
        raw[key] = values if key in MULTI_VALUE_FILTERS else values[-1]
    try:
        return CompanyFilters(**raw)
    except ValidationError as e:
        raise BadRequestError(str(e)) from e


# ----------------------------------------------------------------
# Health & Info
# ----------------------------------------------------------------

@app.get("/", response_model=HealthResponse, tags=["Health"])
def root(data: CompanyDataProvider = Depends(get_data)):
    """
    API health check and information.

    Returns service status and database statistics.
    """
    try:
        stats = data.get_database_stats()
        return HealthResponse(data=HealthData(
            service=settings.API_TITLE,
            version=settings.API_VERSION,
            health="healthy",
            database_path=data.db_path,
            database_stats=DatabaseStatsResponse(**stats),
        ))
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HttpError(500, "Internal Server Error") from e


@app.get("/favicon.ico", include_in_schema=False)
def favicon():
    return Response(status_code=204)


# ----------------------------------------------------------------
# Company Endpoints
# ----------------------------------------------------------------

@app.get(f"{settings.API_PREFIX}/companies", response_model=CompaniesResponse, tags=["Companies"])
def get_companies(
    filters: CompanyFilters = Depends(get_filters),
    limit: int = Query(
        settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE,
        description="Page size"
    ),
    offset: int = Query(
        0, ge=0, le=settings.MAX_OFFSET,
        description="Zero-based index of the first company"
    ),
    sort_by: Optional[str] = Query(None, description="Column to sort by"),
    sort_order: SortOrder = Query(SortOrder.ASC, description="asc or desc"),
    data: CompanyDataProvider = Depends(get_data),
):
    """
    List companies matching the filter criteria, one page at a time.

    **Filters** (all optional, combined with AND):
    - `cui`: exact fiscal code
    - `caen`, `judet`: one or more accepted values
    - `denumire`, `telefon`: substring match
    - any numeric column: minimum value (inclusive)

    Returns the page under `data.companies` and page metadata under
    `pagination`.
    """
    try:
        companies, total = data.get_companies_by_filters(
            filters,
            limit=limit,
            offset=offset,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    except HttpError:
        raise
    except Exception as e:
        logger.error(f"Error fetching companies: {e}")
        raise HttpError(500, "Internal Server Error") from e

    return CompaniesResponse(
        data=CompaniesData(companies=companies),
        pagination=Pagination(
            current_page=offset // limit + 1,
            items_per_page=limit,
            total_items=total,
            total_pages=math.ceil(total / limit),
        ),
    )


@app.get(f"{settings.API_PREFIX}/companies/{{cui}}", response_model=CompanyResponse, tags=["Companies"])
def get_company(cui: str, data: CompanyDataProvider = Depends(get_data)):
    """
    Get a single company by fiscal code (CUI).

    Responds 404 `fail` when no company has that code.
    """
    try:
        company = data.get_company_by_cui(cui)
    except HttpError:
        raise
    except Exception as e:
        logger.error(f"Error fetching company {cui}: {e}")
        raise HttpError(500, "Internal Server Error") from e
    return CompanyResponse(data=CompanyData(company=company))


# ----------------------------------------------------------------
# Statistics
# ----------------------------------------------------------------

@app.get(f"{settings.API_PREFIX}/statistics", response_model=StatisticsResponse, tags=["Statistics"])
def get_statistics(
    filters: CompanyFilters = Depends(get_filters),
    data: CompanyDataProvider = Depends(get_data),
):
    """
    Aggregates over every company matching the filters: count, plus total
    and average employees, net revenue and net profit.
    """
    try:
        stats = data.get_companies_statistics(filters)
    except HttpError:
        raise
    except Exception as e:
        logger.error(f"Error computing statistics: {e}")
        raise HttpError(500, "Internal Server Error") from e
    return StatisticsResponse(data=StatisticsData(statistics=CompanyStatistics(**stats)))


# ----------------------------------------------------------------
# Filter Options
# ----------------------------------------------------------------

@app.get(f"{settings.API_PREFIX}/filters/counties", response_model=OptionsResponse, tags=["Filters"])
def get_counties(data: CompanyDataProvider = Depends(get_data)):
    """Distinct counties present in the registry."""
    values = data.get_counties()
    return OptionsResponse(data=OptionsData(values=values, count=len(values)))


@app.get(f"{settings.API_PREFIX}/filters/caen", response_model=OptionsResponse, tags=["Filters"])
def get_caen_codes(data: CompanyDataProvider = Depends(get_data)):
    """Distinct CAEN activity codes present in the registry."""
    values = data.get_caen_codes()
    return OptionsResponse(data=OptionsData(values=values, count=len(values)))


# ----------------------------------------------------------------
# Cleanup
# ----------------------------------------------------------------

@app.on_event("shutdown")
def shutdown_event():
    """Close database connection on shutdown."""
    global _data
    if _data is not None:
        _data.close()
        _data = None
        logger.info("Database connection closed")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_level="info"
    )
