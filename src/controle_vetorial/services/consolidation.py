from collections import Counter
from enum import Enum
from typing import Dict, Iterable, List, Optional

from controle_vetorial.core.catalog import DEFAULT_CATALOG, ReportingCatalog
from controle_vetorial.schemas.reports import (
    ConsolidatedTotals,
    GroupedRow,
    RankedLocalityRow,
    ReportPublic,
    ReportsSummary,
    WeekRow,
)
from controle_vetorial.services import metrics


class GroupBy(str, Enum):
    LOCALITY = "locality"
    WEEK = "week"
    CYCLE = "cycle"


class GroupedSortField(str, Enum):
    LABEL = "label"
    PROPERTIES = "properties"
    CLOSED = "closed"
    RECOVERED = "recovered"
    INFORMED = "informed"
    PENDENCY_RATE = "pendency_rate"
    LARVICIDE_LOAD = "larvicide_load"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ConsolidationEngine:
    """
    Consolida boletins já filtrados pelo escopo de acesso.

    Nenhum método filtra por acesso: quem chama entrega a lista já
    restrita. Todos os métodos são funções puras da lista recebida.
    """

    def __init__(self, catalog: ReportingCatalog = DEFAULT_CATALOG):
        self.catalog = catalog

    def _containers(self, report: ReportPublic) -> int:
        return metrics.total_containers(report.data, self.catalog.container_categories)

    def consolidate(self, reports: Iterable[ReportPublic]) -> ConsolidatedTotals:
        totals = ConsolidatedTotals(
            containers_by_category={category: 0 for category in self.catalog.container_categories}
        )

        for report in reports:
            data = report.data
            imoveis = metrics.imoveis_of(data)
            depositos = metrics.depositos_of(data)
            tratamentos = metrics.tratamentos_of(data)

            totals.total_properties += metrics.total_properties(data)
            totals.total_closed += imoveis.closed
            totals.total_recovered += imoveis.recovered
            totals.total_informed += imoveis.informed
            totals.total_samples += imoveis.samples
            totals.total_refused += imoveis.refused

            for category in self.catalog.container_categories:
                count = getattr(depositos, category, 0)
                totals.containers_by_category[category] += count
                totals.total_containers += count

            totals.total_eliminated += metrics.eliminated_of(data)
            totals.total_agents += metrics.agents_of(data)
            totals.total_days_worked += data.days_worked if data is not None else 0

            totals.total_inspected += tratamentos.inspected
            totals.total_focal += tratamentos.focal
            totals.total_perifocal += tratamentos.perifocal

            totals.larvicide_quantity += metrics.larvicide_quantity(data)
            totals.larvicide_containers_treated += metrics.larvicide_containers_treated(data)

            totals.report_count += 1
            if report.concluido:
                totals.completed_count += 1

        # sempre recalculada a partir das somas, nunca pela média por boletim
        totals.pendency_rate = metrics.pendency_rate(
            totals.total_closed, totals.total_recovered, totals.total_informed
        )
        return totals

    def weekly_series(self, reports: Iterable[ReportPublic]) -> List[WeekRow]:
        grouped: Dict[str, WeekRow] = {}

        for report in reports:
            week = report.semana_epidemiologica
            row = grouped.get(week)
            if row is None:
                row = grouped[week] = WeekRow(week=week)

            row.properties += metrics.total_properties(report.data)
            row.containers += self._containers(report)
            row.eliminated += metrics.eliminated_of(report.data)
            row.agents += metrics.agents_of(report.data)
            row.reports += 1

        return sorted(
            grouped.values(),
            key=lambda row: metrics.numeric_sort_key(metrics.parse_week_number(row.week)),
        )

    def weeks_with_data(self, reports: Iterable[ReportPublic]) -> List[str]:
        weeks = {report.semana_epidemiologica for report in reports}
        return sorted(weeks, key=lambda week: metrics.numeric_sort_key(metrics.parse_week_number(week)))

    def locality_ranking(self, reports: Iterable[ReportPublic]) -> List[RankedLocalityRow]:
        grouped: Dict[str, dict] = {}

        for report in reports:
            locality = report.localidade
            acc = grouped.get(locality)
            if acc is None:
                acc = grouped[locality] = {
                    "locality": locality,
                    "eliminated": 0,
                    "containers": 0,
                    "properties": 0,
                    "agents": 0,
                    "closed": 0,
                    "recovered": 0,
                    "informed": 0,
                }

            imoveis = metrics.imoveis_of(report.data)
            acc["eliminated"] += metrics.eliminated_of(report.data)
            acc["containers"] += self._containers(report)
            acc["properties"] += metrics.total_properties(report.data)
            acc["agents"] += metrics.agents_of(report.data)
            acc["closed"] += imoveis.closed
            acc["recovered"] += imoveis.recovered
            acc["informed"] += imoveis.informed

        for acc in grouped.values():
            acc["pendency_rate"] = metrics.pendency_rate(acc["closed"], acc["recovered"], acc["informed"])

        # sorted() é estável: empates mantêm a ordem de chegada
        ordered = sorted(grouped.values(), key=lambda acc: acc["pendency_rate"])
        return [RankedLocalityRow(rank=index + 1, **acc) for index, acc in enumerate(ordered)]

    def grouped_table(
        self,
        reports: Iterable[ReportPublic],
        group_by: GroupBy,
        sort_by: Optional[GroupedSortField] = None,
        direction: SortDirection = SortDirection.ASC,
    ) -> List[GroupedRow]:
        """
        Uma linha por chave do agrupamento. Sem `sort_by` (ou com `label`)
        vale a ordem natural do agrupamento; as demais colunas ordenam
        pelo valor, de forma estável a partir dessa ordem.
        """
        group_by = GroupBy(group_by)
        descending = SortDirection(direction) is SortDirection.DESC
        grouped: Dict[str, GroupedRow] = {}

        for report in reports:
            key, label = self._group_key(report, group_by)
            row = grouped.get(key)
            if row is None:
                row = grouped[key] = GroupedRow(key=key, label=label)

            imoveis = metrics.imoveis_of(report.data)
            row.properties += metrics.total_properties(report.data)
            row.closed += imoveis.closed
            row.recovered += imoveis.recovered
            row.informed += imoveis.informed
            row.larvicide_load += metrics.larvicide_quantity(report.data)
            row.reports += 1
            if report.concluido:
                row.completed += 1

        rows = list(grouped.values())
        for row in rows:
            row.pendency_rate = metrics.pendency_rate(row.closed, row.recovered, row.informed)
            row.percent_complete = metrics.percent_complete(row.completed, row.reports)

        rows.sort(key=self._natural_key(group_by), reverse=descending)
        if sort_by is not None and GroupedSortField(sort_by) is not GroupedSortField.LABEL:
            field = GroupedSortField(sort_by).value
            rows.sort(key=lambda row: getattr(row, field), reverse=descending)
        return rows

    @staticmethod
    def _natural_key(group_by: GroupBy):
        if group_by is GroupBy.WEEK:
            return lambda row: metrics.numeric_sort_key(metrics.parse_week_number(row.label))
        if group_by is GroupBy.CYCLE:
            return lambda row: metrics.numeric_sort_key(metrics.parse_cycle_number(row.key))
        return lambda row: metrics.label_sort_key(row.label)

    @staticmethod
    def grouped_totals(rows: Iterable[GroupedRow]) -> GroupedRow:
        """Linha de total da tabela; a pendência sai das somas das colunas."""
        total = GroupedRow(key="total", label="Total")
        for row in rows:
            total.properties += row.properties
            total.closed += row.closed
            total.recovered += row.recovered
            total.informed += row.informed
            total.larvicide_load += row.larvicide_load
            total.reports += row.reports
            total.completed += row.completed

        total.pendency_rate = metrics.pendency_rate(total.closed, total.recovered, total.informed)
        total.percent_complete = metrics.percent_complete(total.completed, total.reports)
        return total

    @staticmethod
    def _group_key(report: ReportPublic, group_by: GroupBy) -> tuple[str, str]:
        if group_by is GroupBy.WEEK:
            return report.semana_epidemiologica, report.semana_epidemiologica
        if group_by is GroupBy.CYCLE:
            return f"ciclo-{report.ciclo}", f"Ciclo {report.ciclo}"
        return report.localidade, report.localidade

    def summary(self, reports: Iterable[ReportPublic]) -> ReportsSummary:
        reports = list(reports)
        completed = sum(1 for report in reports if report.concluido)

        weeks = self.weeks_with_data(reports)
        latest_week: Optional[str] = weeks[-1] if weeks else None

        # Counter.most_common preserva a ordem de primeira ocorrência nos empates
        locality_counts = Counter(report.localidade for report in reports if report.localidade)
        most_frequent = locality_counts.most_common(1)[0][0] if locality_counts else None

        return ReportsSummary(
            total=len(reports),
            completed=completed,
            open=len(reports) - completed,
            latest_week=latest_week,
            most_frequent_locality=most_frequent,
        )
