"""Tests for DatabaseManager with real SQLite in tmpdir."""

import pytest

from database import DatabaseManager, read_companies_csv


CSV_EXPORT = """cui,caen,denumire,judet,telefon,numar_mediu_de_salariati,cifra_de_afaceri_neta,profit_net,extra
14399840,6201,Alpha Software SRL,Cluj,0264123456,120,5000000,800000,x
22334455,6202,Beta Consulting SRL,Iasi,0232111222,,1200000.5,n/a,y
"""


# ---------------------------------------------------------------------------
# Companies
# ---------------------------------------------------------------------------

class TestUpsertCompanies:
    def test_insert(self, tmp_db, sample_companies):
        n = tmp_db.upsert_companies(sample_companies)
        assert n == 5
        assert tmp_db.count_companies() == 5

    def test_replace_on_conflict(self, tmp_db, sample_company):
        tmp_db.upsert_companies([sample_company(cui="1", denumire="Old Name")])
        tmp_db.upsert_companies([sample_company(cui="1", denumire="New Name")])
        rows = tmp_db.query("SELECT * FROM Companies WHERE cui = '1'")
        assert len(rows) == 1
        assert rows[0]["denumire"] == "New Name"

    def test_null_figures_stored(self, tmp_db, sample_company):
        tmp_db.upsert_companies([sample_company(cui="1", profit_net=None)])
        assert tmp_db.get_company("1")["profit_net"] is None

    def test_get_missing_company(self, tmp_db):
        assert tmp_db.get_company("nope") is None

    def test_schema_idempotent(self, tmp_db, sample_company):
        tmp_db.upsert_companies([sample_company()])
        again = DatabaseManager(db_path=tmp_db.db_path)
        assert again.count_companies() == 1
        again.close()


# ---------------------------------------------------------------------------
# CSV loading
# ---------------------------------------------------------------------------

class TestReadCompaniesCsv:
    def test_parses_rows(self, tmp_path):
        path = tmp_path / "export.csv"
        path.write_text(CSV_EXPORT)
        companies = read_companies_csv(str(path))
        assert [c.cui for c in companies] == ["14399840", "22334455"]
        assert companies[0].caen == "6201"
        assert companies[0].numar_mediu_de_salariati == 120

    def test_blank_and_garbage_numbers_become_none(self, tmp_path):
        path = tmp_path / "export.csv"
        path.write_text(CSV_EXPORT)
        beta = read_companies_csv(str(path))[1]
        assert beta.numar_mediu_de_salariati is None
        assert beta.profit_net is None
        assert beta.cifra_de_afaceri_neta == pytest.approx(1200000.5)

    def test_missing_cui_column_raises(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("denumire,judet\nX,Cluj\n")
        with pytest.raises(ValueError):
            read_companies_csv(str(path))

    def test_populate_from_csv(self, tmp_db, tmp_path):
        path = tmp_path / "export.csv"
        path.write_text(CSV_EXPORT)
        n = tmp_db.populate_from_csv(str(path))
        assert n == 2
        assert tmp_db.get_company("22334455")["judet"] == "Iasi"
