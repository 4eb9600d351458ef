"""Shared fixtures for the test suite."""

import pytest
from unittest.mock import MagicMock

from database import DatabaseManager
from models import Company


@pytest.fixture
def tmp_db(tmp_path):
    """Fresh DatabaseManager backed by a real SQLite DB in tmp_path."""
    db_path = str(tmp_path / "test.db")
    db = DatabaseManager(db_path=db_path)
    yield db
    db.close()


@pytest.fixture
def sample_company():
    """Factory fixture: call with overrides to get a Company."""
    def _make(**overrides):
        data = {
            "cui": "10000000",
            "caen": "6201",
            "denumire": "Test Company SRL",
            "judet": "Cluj",
            "telefon": "0264000000",
            "numar_mediu_de_salariati": 10.0,
            "cifra_de_afaceri_neta": 100000.0,
            "profit_net": 10000.0,
        }
        data.update(overrides)
        return Company(**data)
    return _make


@pytest.fixture
def sample_companies(sample_company):
    """
    Five companies across four counties; the last one reported no figures.

    Totals: 473 employees, 26,500,000 revenue, 3,470,000 profit.
    """
    return [
        sample_company(
            cui="14399840", caen="6201", denumire="Alpha Software SRL", judet="Cluj",
            telefon="0264123456", numar_mediu_de_salariati=120.0,
            cifra_de_afaceri_neta=5_000_000.0, profit_net=800_000.0, datorii=250_000.0,
        ),
        sample_company(
            cui="22334455", caen="6202", denumire="Beta Consulting SRL", judet="Iasi",
            telefon="0232111222", numar_mediu_de_salariati=45.0,
            cifra_de_afaceri_neta=1_200_000.0, profit_net=150_000.0,
        ),
        sample_company(
            cui="33445566", caen="6311", denumire="Gamma Data SA", judet="Bucuresti",
            telefon="0213334444", numar_mediu_de_salariati=300.0,
            cifra_de_afaceri_neta=20_000_000.0, profit_net=2_500_000.0,
        ),
        sample_company(
            cui="44556677", caen="6201", denumire="Delta Soft SRL", judet="Cluj",
            telefon="0264999888", numar_mediu_de_salariati=8.0,
            cifra_de_afaceri_neta=300_000.0, profit_net=20_000.0,
        ),
        sample_company(
            cui="55667788", caen="6209", denumire="Epsilon IT SRL", judet="Timis",
            telefon="", numar_mediu_de_salariati=None,
            cifra_de_afaceri_neta=None, profit_net=None,
        ),
    ]


@pytest.fixture
def sample_records(sample_companies):
    """The sample companies as plain dicts, as the API returns them."""
    return [c.model_dump() for c in sample_companies]


@pytest.fixture
def seeded_db(tmp_db, sample_companies):
    tmp_db.upsert_companies(sample_companies)
    return tmp_db


@pytest.fixture
def provider(seeded_db):
    """Read-only provider over the seeded DB (writer stays open for WAL)."""
    from registry_api.data_access import CompanyDataProvider

    data = CompanyDataProvider(db_path=seeded_db.db_path)
    yield data
    data.close()


@pytest.fixture
def api_client(provider):
    """TestClient wired to the seeded provider."""
    from fastapi.testclient import TestClient
    from registry_api.main import app, get_data

    app.dependency_overrides[get_data] = lambda: provider
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def mock_response():
    """Factory for mock HTTP responses."""
    def _make(status_code=200, json_data=None):
        resp = MagicMock()
        resp.status_code = status_code
        resp.json.return_value = json_data or {}
        resp.raise_for_status.return_value = None
        return resp
    return _make
