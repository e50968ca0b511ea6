"""
Testes do motor de consolidação (totais, série semanal, ranking, tabela agrupada)
"""
import pytest

from controle_vetorial.core.catalog import ReportingCatalog
from controle_vetorial.services.consolidation import ConsolidationEngine, GroupBy, GroupedSortField, SortDirection
from tests.factories import make_report, pendency_report


@pytest.fixture
def engine() -> ConsolidationEngine:
    return ConsolidationEngine()


class TestConsolidate:
    """Totais consolidados"""

    def test_empty_collection(self, engine):
        totals = engine.consolidate([])

        assert totals.report_count == 0
        assert totals.pendency_rate == 0.0
        assert totals.containers_by_category == {"A1": 0, "A2": 0, "B": 0, "C": 0, "D1": 0, "D2": 0, "E": 0}

    def test_pendency_comes_from_sums_not_average(self, engine):
        report_a = pendency_report("Centro", closed=10, recovered=0, informed=10)
        report_b = pendency_report("Fatima", closed=0, recovered=0, informed=100)

        per_report = [engine.consolidate([r]).pendency_rate for r in (report_a, report_b)]
        assert per_report == [100.0, 0.0]

        totals = engine.consolidate([report_a, report_b])
        assert totals.pendency_rate == 9.09
        assert totals.pendency_rate != sum(per_report) / len(per_report)

    def test_sums_every_counter(self, engine):
        first = make_report(concluido=True, data={
            "imoveis": {
                "residencias": 20, "comercios": 5, "terrenos": 1, "pontos": 1, "outros": 3,
                "amostras": 2, "fechados": 6, "recusas": 1, "recuperados": 2, "informados": 30,
            },
            "tratamentos": {"inspecionados": 12, "focal": 4, "perifocal": 1},
            "depositos": {"A1": 1, "A2": 2, "B": 3, "C": 4, "D1": 5, "D2": 6, "E": 7},
            "eliminados": 9,
            "larvicida1": {"tipo": "BTI", "quantidade": 10.5, "dep tratados": 3},
            "larvicida2": {"tipo": "BTI", "quantidade": 1.5, "dep tratados": 1},
            "adulticida": {"tipo": "UBV", "cargas": 2},
            "agentes": 4,
            "diasTrabalhados": 5,
        })
        second = make_report(data={
            "imoveis": {"residencias": 10, "fechados": 4, "recuperados": 0, "informados": 20},
            "depositos": {"A1": 10},
            "eliminados": 1,
            "larvicida1": {"tipo": "BTI", "quantidade": 3, "dep tratados": 2},
            "agentes": 2,
            "diasTrabalhados": 1,
        })

        totals = engine.consolidate([first, second])

        assert totals.total_properties == 40
        assert totals.total_closed == 10
        assert totals.total_recovered == 2
        assert totals.total_informed == 50
        assert totals.total_samples == 2
        assert totals.total_refused == 1
        assert totals.containers_by_category["A1"] == 11
        assert totals.total_containers == 38
        assert totals.total_eliminated == 10
        assert totals.total_agents == 6
        assert totals.total_days_worked == 6
        assert (totals.total_inspected, totals.total_focal, totals.total_perifocal) == (12, 4, 1)
        assert totals.larvicide_quantity == pytest.approx(15.0)
        assert totals.larvicide_containers_treated == 6
        assert totals.report_count == 2
        assert totals.completed_count == 1
        # (10 - 2) * 100 / 50
        assert totals.pendency_rate == 16.0

    def test_malformed_payload_contributes_zero(self, engine):
        bare = make_report(data={"larvicida1": None, "imoveis": None, "depositos": {"A1": None}})
        normal = make_report(data={"imoveis": {"residencias": 3}, "depositos": {"A1": 2}})

        totals = engine.consolidate([bare, normal])

        assert totals.total_properties == 3
        assert totals.total_containers == 2
        assert totals.report_count == 2

    def test_catalog_limits_container_categories(self):
        small = ConsolidationEngine(ReportingCatalog(container_categories=("A1", "B")))
        report = make_report(data={"depositos": {"A1": 1, "B": 2, "E": 50}})

        totals = small.consolidate([report])

        assert totals.containers_by_category == {"A1": 1, "B": 2}
        assert totals.total_containers == 3


class TestWeeklySeries:

    def test_sorted_by_week_number_not_string(self, engine):
        reports = [
            make_report(semana="SE 10"),
            make_report(semana="SE 2"),
            make_report(semana="SE 01"),
        ]

        weeks = [row.week for row in engine.weekly_series(reports)]

        assert weeks == ["SE 01", "SE 2", "SE 10"]

    def test_groups_and_sums_per_week(self, engine):
        reports = [
            make_report(semana="SE 03", data={
                "imoveis": {"residencias": 5, "comercios": 1},
                "depositos": {"B": 2, "D1": 1},
                "eliminados": 2,
                "agentes": 3,
            }),
            make_report(semana="SE 03", data={"imoveis": {"outros": 4}, "agentes": 1}),
            make_report(semana="SE 04", data={"eliminados": 7}),
        ]

        rows = engine.weekly_series(reports)

        assert len(rows) == 2
        week3 = rows[0]
        assert week3.week == "SE 03"
        assert (week3.properties, week3.containers, week3.eliminated, week3.agents, week3.reports) == (10, 3, 2, 4, 2)
        assert rows[1].eliminated == 7

    def test_weeks_with_data_distinct_and_numeric(self, engine):
        reports = [make_report(semana=s) for s in ("SE 12", "SE 03", "SE 12", "SE 07")]

        assert engine.weeks_with_data(reports) == ["SE 03", "SE 07", "SE 12"]


class TestLocalityRanking:

    def test_ascending_by_pendency_with_ranks(self, engine):
        reports = [
            pendency_report("Alfa", closed=5, recovered=0, informed=100),
            pendency_report("Beta", closed=0, recovered=0, informed=50),
            pendency_report("Gama", closed=25, recovered=0, informed=200),
        ]

        ranking = engine.locality_ranking(reports)

        assert [(row.locality, row.pendency_rate, row.rank) for row in ranking] == [
            ("Beta", 0.0, 1),
            ("Alfa", 5.0, 2),
            ("Gama", 12.5, 3),
        ]

    def test_ties_keep_input_order(self, engine):
        reports = [
            pendency_report("Zeta", closed=0, recovered=0, informed=0),
            pendency_report("Alfa", closed=0, recovered=0, informed=0),
        ]

        ranking = engine.locality_ranking(reports)

        assert [row.locality for row in ranking] == ["Zeta", "Alfa"]
        assert [row.rank for row in ranking] == [1, 2]

    def test_pendency_per_locality_uses_locality_sums(self, engine):
        reports = [
            pendency_report("Centro", closed=10, recovered=0, informed=10),
            pendency_report("Centro", closed=0, recovered=0, informed=100),
            make_report("Centro", data={"eliminados": 3, "depositos": {"C": 2}, "agentes": 1}),
        ]

        (row,) = engine.locality_ranking(reports)

        assert row.pendency_rate == 9.09
        assert (row.closed, row.recovered, row.informed) == (10, 0, 110)
        assert (row.eliminated, row.containers, row.agents) == (3, 2, 1)


class TestGroupedTable:

    def test_group_by_cycle_sorts_numerically(self, engine):
        reports = [make_report(ciclo=c) for c in (24, 1, 3, 1)]

        rows = engine.grouped_table(reports, GroupBy.CYCLE)

        assert [row.label for row in rows] == ["Ciclo 1", "Ciclo 3", "Ciclo 24"]
        assert [row.key for row in rows] == ["ciclo-1", "ciclo-3", "ciclo-24"]
        assert rows[0].reports == 2

    def test_group_by_week_sorts_numerically(self, engine):
        reports = [make_report(semana=s) for s in ("SE 11", "SE 09", "SE 1")]

        rows = engine.grouped_table(reports, "week")

        assert [row.label for row in rows] == ["SE 1", "SE 09", "SE 11"]

    def test_group_by_locality_sorts_alphabetically(self, engine):
        reports = [make_report(localidade=name) for name in ("Zizo", "Centro", "Mangabinha")]

        rows = engine.grouped_table(reports, GroupBy.LOCALITY)

        assert [row.label for row in rows] == ["Centro", "Mangabinha", "Zizo"]

    def test_row_metrics(self, engine):
        reports = [
            make_report("Centro", concluido=True, data={
                "imoveis": {"residencias": 8, "terrenos": 2, "fechados": 3, "recuperados": 1, "informados": 8},
                "larvicida1": {"quantidade": 4.5},
                "larvicida2": {"quantidade": 0.5},
            }),
            make_report("Centro", concluido=True, data={"imoveis": {"informados": 8}}),
            make_report("Centro", concluido=False),
        ]

        (row,) = engine.grouped_table(reports, GroupBy.LOCALITY)

        assert row.properties == 10
        assert row.larvicide_load == pytest.approx(5.0)
        assert (row.reports, row.completed) == (3, 2)
        assert row.percent_complete == 67
        # (3 - 1) * 100 / 16
        assert row.pendency_rate == 12.5

    def test_locality_order_ignores_case_and_accents(self, engine):
        reports = [make_report(localidade=name) for name in ("Zizo", "Água Branca", "centro")]

        rows = engine.grouped_table(reports, GroupBy.LOCALITY)

        assert [row.label for row in rows] == ["Água Branca", "centro", "Zizo"]

    def test_label_descending_reverses_natural_order(self, engine):
        reports = [make_report(ciclo=c) for c in (24, 1, 3)]

        rows = engine.grouped_table(reports, GroupBy.CYCLE, sort_by=GroupedSortField.LABEL, direction="desc")

        assert [row.label for row in rows] == ["Ciclo 24", "Ciclo 3", "Ciclo 1"]

    @pytest.fixture
    def sortable(self):
        return [
            pendency_report("Beta", closed=0, recovered=0, informed=10),
            pendency_report("Alfa", closed=4, recovered=0, informed=10),
            pendency_report("Gama", closed=0, recovered=0, informed=40),
            pendency_report("Delta", closed=1, recovered=0, informed=10),
        ]

    def test_sort_by_column_ascending_is_stable(self, engine, sortable):
        rows = engine.grouped_table(sortable, GroupBy.LOCALITY, sort_by="pendency_rate")

        # Beta e Gama empatam em 0: ficam na ordem alfabética de partida
        assert [row.label for row in rows] == ["Beta", "Gama", "Delta", "Alfa"]

    def test_sort_by_column_descending(self, engine, sortable):
        rows = engine.grouped_table(
            sortable, GroupBy.LOCALITY, sort_by=GroupedSortField.INFORMED, direction=SortDirection.DESC
        )

        assert [row.label for row in rows] == ["Gama", "Delta", "Beta", "Alfa"]

    def test_totals_pendency_comes_from_column_sums(self, engine, sortable):
        rows = engine.grouped_table(sortable, GroupBy.LOCALITY)

        totals = engine.grouped_totals(rows)

        assert (totals.key, totals.label) == ("total", "Total")
        assert (totals.closed, totals.informed, totals.reports) == (5, 70, 4)
        # (5 - 0) * 100 / 70
        assert totals.pendency_rate == 7.14
        row_average = sum(row.pendency_rate for row in rows) / len(rows)
        assert row_average == 12.5
        assert totals.pendency_rate != row_average

    def test_totals_of_empty_table(self, engine):
        totals = engine.grouped_totals([])

        assert totals.pendency_rate == 0.0
        assert totals.percent_complete == 0

    def test_unknown_grouping_is_rejected(self, engine):
        with pytest.raises(ValueError):
            engine.grouped_table([make_report()], "municipio")


class TestSummary:

    def test_summary(self, engine):
        reports = [
            make_report("Centro", semana="SE 09", concluido=True),
            make_report("Fatima", semana="SE 10"),
            make_report("Fatima", semana="SE 02"),
        ]

        summary = engine.summary(reports)

        assert summary.total == 3
        assert summary.completed == 1
        assert summary.open == 2
        assert summary.latest_week == "SE 10"
        assert summary.most_frequent_locality == "Fatima"

    def test_summary_empty(self, engine):
        summary = engine.summary([])

        assert summary.total == 0
        assert summary.latest_week is None
        assert summary.most_frequent_locality is None
