"""Tests for filter evaluation: SQL generation, in-memory matching, paging, aggregates."""

import pytest

from models import CompanyFilters, SortOrder
from registry_api.errors import BadRequestError
from registry_api.filters import (
    build_order_by,
    build_where,
    compute_statistics,
    filter_records,
    matches,
    normalize_filters,
    paginate,
    parse_number,
    sort_records,
    top_company,
)


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

class TestNormalizeFilters:
    def test_none(self):
        assert normalize_filters(None).active() == {}

    def test_unknown_keys_ignored(self):
        f = normalize_filters({"judet": "Cluj", "limit": "10", "bogus": "x"})
        assert f.active() == {"judet": ["Cluj"]}

    def test_passthrough(self):
        f = CompanyFilters(cui="1")
        assert normalize_filters(f) is f


class TestParseNumber:
    @pytest.mark.parametrize("raw,expected", [("50", 50.0), (" 1.5 ", 1.5), ("-3", -3.0), (7, 7.0)])
    def test_numbers(self, raw, expected):
        assert parse_number(raw) == expected

    @pytest.mark.parametrize("raw", ["abc", "", None, "nan", "inf", True])
    def test_not_numbers(self, raw):
        assert parse_number(raw) is None


# ---------------------------------------------------------------------------
# SQL generation
# ---------------------------------------------------------------------------

class TestBuildWhere:
    def test_no_criteria(self):
        clause, params = build_where(CompanyFilters())
        assert clause == "1=1"
        assert params == []

    def test_exact_cui(self):
        clause, params = build_where(CompanyFilters(cui="14399840"))
        assert "cui = ?" in clause
        assert params == ["14399840"]

    def test_caen_in_list(self):
        clause, params = build_where(CompanyFilters(caen=["6201", "6202"]))
        assert "caen IN (?,?)" in clause
        assert params == ["6201", "6202"]

    def test_numeric_threshold_inclusive(self):
        clause, params = build_where(CompanyFilters(numar_mediu_de_salariati="50"))
        assert "numar_mediu_de_salariati >= ?" in clause
        assert params == [50.0]

    def test_zero_threshold_applied(self):
        clause, params = build_where(CompanyFilters(profit_net="0"))
        assert "profit_net >= ?" in clause
        assert params == [0.0]

    def test_non_numeric_threshold_rejected(self):
        with pytest.raises(BadRequestError) as exc:
            build_where(CompanyFilters(profit_net="lots"))
        assert exc.value.status == 400
        assert "profit_net" in exc.value.message

    def test_name_like_case_insensitive(self):
        clause, params = build_where(CompanyFilters(denumire="Soft"))
        assert "lower(denumire) LIKE lower(?)" in clause
        assert params == ["%Soft%"]

    def test_phone_like(self):
        clause, params = build_where(CompanyFilters(telefon="0264"))
        assert "telefon LIKE ?" in clause
        assert params == ["%0264%"]

    def test_county_lowered(self):
        clause, params = build_where(CompanyFilters(judet=["Cluj", "IASI"]))
        assert "lower(judet) IN (?,?)" in clause
        assert params == ["cluj", "iasi"]

    def test_predicates_and_together(self):
        clause, params = build_where(CompanyFilters(cui="1", judet=["Cluj"], profit_net="5"))
        assert clause.count(" AND ") == 3
        assert params == ["1", 5.0, "cluj"]


class TestBuildOrderBy:
    def test_default_insertion_order(self):
        assert build_order_by(None) == "ORDER BY rowid"

    def test_nulls_last_with_tiebreak(self):
        sql = build_order_by("profit_net", SortOrder.DESC)
        assert sql == "ORDER BY profit_net IS NULL, profit_net DESC, cui ASC"

    def test_text_blank_counts_as_missing(self):
        sql = build_order_by("denumire")
        assert sql == (
            "ORDER BY NULLIF(denumire, '') IS NULL, "
            "NULLIF(denumire, '') COLLATE NOCASE ASC, cui ASC"
        )

    def test_unknown_column_rejected(self):
        with pytest.raises(BadRequestError):
            build_order_by("profit_net; DROP TABLE Companies")


# ---------------------------------------------------------------------------
# In-memory matching
# ---------------------------------------------------------------------------

class TestMatches:
    def test_no_criteria_matches_everything(self, sample_records):
        assert all(matches(r, CompanyFilters()) for r in sample_records)

    def test_numeric_greater_or_equal(self, sample_records):
        beta = sample_records[1]
        assert matches(beta, CompanyFilters(numar_mediu_de_salariati="45"))
        assert not matches(beta, CompanyFilters(numar_mediu_de_salariati="46"))

    def test_missing_figure_fails_threshold(self, sample_records):
        epsilon = sample_records[4]
        assert not matches(epsilon, CompanyFilters(profit_net="0"))

    def test_non_numeric_criterion_falls_back_to_substring(self, sample_records):
        record = {"cui": "1", "datorii": "1.200 RON"}
        assert matches(record, CompanyFilters(datorii="ron"))
        assert not matches(sample_records[0], CompanyFilters(profit_net="abc"))

    def test_set_criterion_any_value(self, sample_records):
        alpha = sample_records[0]
        assert matches(alpha, CompanyFilters(judet=["Iasi", "cluj"]))
        assert not matches(alpha, CompanyFilters(judet=["Iasi", "Timis"]))

    def test_set_criterion_substring(self, sample_records):
        gamma = sample_records[2]
        assert matches(gamma, CompanyFilters(judet=["bucur"]))

    def test_set_criterion_whitespace_tokens(self, sample_company):
        company = sample_company(judet="Satu Mare")
        assert matches(company, CompanyFilters(judet=["mare satu"]))
        assert not matches(company, CompanyFilters(judet=["satu mic"]))

    def test_text_substring_case_insensitive(self, sample_records):
        assert matches(sample_records[0], CompanyFilters(denumire="SOFTWARE"))
        assert not matches(sample_records[1], CompanyFilters(denumire="software"))

    def test_all_criteria_must_pass(self, sample_records):
        f = CompanyFilters(judet=["Cluj"], numar_mediu_de_salariati="100")
        assert [r["cui"] for r in filter_records(sample_records, f)] == ["14399840"]

    def test_works_on_models(self, sample_companies):
        f = CompanyFilters(caen=["6201"])
        assert len(filter_records(sample_companies, f)) == 2

    def test_extra_criterion_never_grows_result(self, sample_records):
        base = filter_records(sample_records, CompanyFilters(caen=["6201"]))
        narrowed = filter_records(
            sample_records, CompanyFilters(caen=["6201"], denumire="delta")
        )
        assert len(narrowed) <= len(base)


# ---------------------------------------------------------------------------
# Paging and sorting
# ---------------------------------------------------------------------------

class TestPaginate:
    def test_slices(self):
        assert paginate(list(range(10)), 3, 4) == [3, 4, 5, 6]

    def test_past_the_end(self):
        assert paginate(list(range(5)), 5, 10) == []

    def test_negative_offset_clamped(self):
        assert paginate(list(range(5)), -2, 2) == [0, 1]


class TestSortRecords:
    def test_ascending_nulls_last(self, sample_records):
        rows = sort_records(sample_records, "profit_net")
        assert [r["cui"] for r in rows][-1] == "55667788"
        assert rows[0]["cui"] == "44556677"

    def test_descending_nulls_last(self, sample_records):
        rows = sort_records(sample_records, "cifra_de_afaceri_neta", SortOrder.DESC)
        assert rows[0]["denumire"] == "Gamma Data SA"
        assert rows[-1]["cui"] == "55667788"

    def test_text_case_insensitive(self, sample_company):
        rows = sort_records(
            [sample_company(cui="1", denumire="beta"), sample_company(cui="2", denumire="Alpha")],
            "denumire",
        )
        assert [r.cui for r in rows] == ["2", "1"]

    def test_ties_and_blanks_ordered_by_cui(self, sample_company):
        rows = sort_records(
            [
                sample_company(cui="3", denumire=""),
                sample_company(cui="2", denumire="alpha"),
                sample_company(cui="1", denumire="Alpha"),
            ],
            "denumire",
        )
        assert [r.cui for r in rows] == ["1", "2", "3"]

    def test_no_column_keeps_order(self, sample_records):
        assert sort_records(sample_records, None) == sample_records

    def test_unknown_column(self, sample_records):
        with pytest.raises(ValueError):
            sort_records(sample_records, "nope")


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

class TestComputeStatistics:
    def test_totals_and_averages(self, sample_records):
        stats = compute_statistics(sample_records)
        assert stats["total_companies"] == 5
        assert stats["total_employees"] == 473
        assert stats["average_employees"] == 95
        assert stats["total_revenue"] == 26_500_000
        assert stats["average_revenue"] == 5_300_000
        assert stats["total_profit"] == 3_470_000
        assert stats["average_profit"] == 694_000

    def test_empty_set_no_division(self):
        stats = compute_statistics([])
        assert stats["total_companies"] == 0
        assert stats["average_employees"] == 0
        assert stats["average_revenue"] == 0
        assert stats["average_profit"] == 0

    def test_average_rounds_half_up(self, sample_company):
        stats = compute_statistics([
            sample_company(cui="1", numar_mediu_de_salariati=1.0),
            sample_company(cui="2", numar_mediu_de_salariati=2.0),
        ])
        assert stats["average_employees"] == 2


class TestTopCompany:
    def test_largest_value(self, sample_records):
        assert top_company(sample_records, "numar_mediu_de_salariati")["cui"] == "33445566"

    def test_empty(self):
        assert top_company([], "profit_net") is None
