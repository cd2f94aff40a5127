"""Tests for the analytics pipeline and the consolidated report."""

from __future__ import annotations

import csv
import io
import json
from datetime import date, timedelta

import pytest

from cyclecast.analytics.pipeline import analyze_history
from cyclecast.analytics.prediction import START_TRACKING
from cyclecast.analytics.report import CycleReport, CSV_HEADERS
from cyclecast.config import Settings
from cyclecast.history import CycleRecord

from tests.conftest import make_history

TODAY = date(2024, 6, 1)


class TestEmptyHistory:
    def test_defaults(self):
        report = analyze_history([], today=TODAY)
        assert report.statistics.average_length == 28
        assert report.confidence == 0.0
        assert report.recommendations == [START_TRACKING]
        assert len(report.insights) == 1
        assert report.risks == []
        assert report.profile is None
        assert report.patterns.insufficient_data is True
        assert report.prediction.next_cycle_start == date(2024, 6, 29)

    def test_everything_filtered_out(self):
        report = analyze_history(make_history([40, 45, 15]), today=TODAY)
        assert report.statistics.total_cycles == 0
        assert report.confidence == 0.0
        assert report.prediction.next_cycle_start == date(2024, 6, 29)

    def test_today_defaults_to_current_date(self):
        report = analyze_history([])
        assert report.prediction.next_cycle_start == date.today() + timedelta(days=28)


class TestAnalyzeHistory:
    def test_single_record(self):
        report = analyze_history(make_history([29]))
        assert report.confidence == 0.3
        assert report.prediction.next_cycle_start == date(2024, 1, 30)

    def test_regular_history(self, regular_history):
        report = analyze_history(regular_history)
        assert report.statistics.total_cycles == 6
        assert report.confidence == 0.95
        assert report.patterns.insufficient_data is False
        assert report.patterns.outliers == []
        assert report.profile.health_score == 100
        assert report.risks == []

    def test_outlier_cycle_reported(self):
        history = make_history([28] * 7 + [38])
        report = analyze_history(history)
        assert [o.length for o in report.patterns.outliers] == [38]
        assert report.patterns.outliers[0].date == history[-1].start
        assert report.patterns.cyclical is not None
        # the 38-day cycle is still left out of the forecast
        assert report.statistics.total_cycles == 7
        assert report.statistics.longest == 28

    def test_in_range_outlier_reported(self):
        report = analyze_history(make_history([28] * 7 + [34]))
        assert [o.length for o in report.patterns.outliers] == [34]

    def test_long_cycles_flagged(self):
        report = analyze_history(make_history([40] * 6), today=TODAY)
        assert report.statistics.total_cycles == 0
        assert [i.title for i in report.insights] == ["Very Long Cycles"]
        assert {r.condition for r in report.risks} == {"PCOS", "thyroid_dysfunction"}
        assert report.profile.total_cycles == 6
        assert report.profile.average_length == 40.0

    def test_short_cycles_flagged(self):
        report = analyze_history(make_history([18] * 6), today=TODAY)
        assert [i.title for i in report.insights] == ["Very Short Cycles"]
        assert [r.condition for r in report.risks] == ["thyroid_dysfunction"]

    def test_out_of_range_cycles_dropped(self):
        history = make_history([28, 50, 29, 18, 30])
        report = analyze_history(history)
        assert report.statistics.total_cycles == 3
        assert report.statistics.shortest >= 21
        assert report.statistics.longest <= 35

    def test_next_start_after_last_record(self):
        history = make_history([26, 31, 28, 35, 22])
        for adv in (False, True):
            report = analyze_history(history, settings=Settings(advanced_estimation=adv))
            assert report.prediction.next_cycle_start > history[-1].start

    def test_window_is_seven_days(self, three_cycles):
        window = analyze_history(three_cycles).fertility_window
        assert window.window_end - window.window_start == timedelta(days=6)

    def test_settings_mapping(self):
        history = make_history([24, 30, 30])
        report = analyze_history(history, settings={"lutealLength": 12, "advancedEstimation": True})
        assert report.prediction.next_cycle_start == date(2024, 3, 22)
        # length 31, ovulation on cycle day 19
        assert report.prediction.ovulation_date == date(2024, 3, 22) + timedelta(days=18)

    def test_symptoms(self, regular_history):
        report = analyze_history(regular_history, symptoms={"severe_pain"})
        assert [i.title for i in report.insights] == ["Severe Pain"]

    def test_mappings_accepted(self):
        raw = [{"start": "2024-02-01", "length": 30}, {"start": "2024-01-02", "length": 30}]
        report = analyze_history(raw)
        assert report.statistics.total_cycles == 2
        assert report.prediction.next_cycle_start == date(2024, 3, 2)

    def test_input_not_mutated(self):
        records = [CycleRecord(date(2024, 3, 1), 28), CycleRecord(date(2024, 1, 1), 40)]
        snapshot = list(records)
        analyze_history(records)
        assert records == snapshot

    def test_deterministic(self, three_cycles):
        assert analyze_history(three_cycles).to_dict() == analyze_history(three_cycles).to_dict()


class TestReportExport:
    def test_to_dict_dates_are_strings(self, regular_history):
        d = analyze_history(regular_history).to_dict()
        assert d["prediction"]["next_cycle_start"] == "2024-06-17"
        assert d["fertility_window"]["days"][0]["date"] == "2024-06-25"

    def test_to_json_roundtrips(self, regular_history):
        parsed = json.loads(analyze_history(regular_history).to_json())
        assert parsed["statistics"]["average_length"] == 28.0
        assert parsed["confidence"] == 0.95

    def test_flatten(self, regular_history):
        flat = analyze_history(regular_history).flatten()
        assert flat["statistics.average_length"] == 28.0
        assert flat["prediction.following_cycles.0.start_date"] == "2024-07-15"
        assert flat["profile.health_score"] == 100
        assert all(not isinstance(v, (dict, list)) for v in flat.values())

    def test_to_csv(self):
        history = make_history([28] * 7 + [34])
        report = analyze_history(history)
        rows = list(csv.reader(io.StringIO(report.to_csv(history))))
        assert rows[0] == CSV_HEADERS
        assert len(rows) == 1 + len(history) + 1
        assert rows[-2][4] == "outlier"
        assert rows[1][4] == ""
        assert rows[-1][4] == "predicted"
        assert rows[-1][0] == report.prediction.next_cycle_start.isoformat()

    def test_to_csv_marks_excluded(self):
        history = make_history([28, 28, 60, 28])
        report = analyze_history(history)
        rows = list(csv.reader(io.StringIO(report.to_csv(history))))
        assert [r[4] for r in rows[1:-1]] == ["", "", "excluded", ""]
        assert rows[3][1] == "60"

    def test_flatten_keeps_empty_containers(self):
        flat = analyze_history([], today=TODAY).flatten()
        assert flat["prediction.following_cycles"] is None
        assert flat["risks"] is None
        assert flat["prediction.next_cycle_start"] == "2024-06-29"

    def test_to_csv_without_profile(self):
        report = analyze_history([], today=TODAY)
        rows = list(csv.reader(io.StringIO(report.to_csv())))
        assert rows == [CSV_HEADERS, ["2024-06-29", "", "28", "", "predicted"]]

    def test_repr(self, regular_history):
        report = analyze_history(regular_history)
        assert isinstance(report, CycleReport)
        assert "2024-06-17" in repr(report)
