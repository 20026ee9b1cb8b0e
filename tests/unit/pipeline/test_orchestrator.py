"""End-to-end tests for SuppressionPipeline over real .xlsx files."""

from __future__ import annotations

from datetime import date, datetime, timezone

import openpyxl
import pytest

from leadscrub.core.exceptions import MalformedInputError, MissingColumnsError, StoreUnavailableError
from leadscrub.models.pipeline import PipelineOptions, RunState
from leadscrub.pipeline.orchestrator import SuppressionPipeline
from tests.fakes import (
    HEADER,
    MemorySuppressionStore,
    RecordingObserver,
    contact,
    read_rows,
    truncate_part,
    write_workbook,
)

NOW = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)
THIRTEEN_MONTHS_AGO = date(2025, 9, 19)

FULL = PipelineOptions(client_scope_enabled=True, client_code="C1", recency_window_months=12)


@pytest.fixture
def store():
    return MemorySuppressionStore()


@pytest.fixture
def observer():
    return RecordingObserver()


@pytest.fixture
def out_dir(tmp_path):
    return tmp_path / "out"


@pytest.fixture
def pipeline(store, observer, out_dir):
    return SuppressionPipeline(store, out_dir, observer=observer, clock=lambda: NOW)


@pytest.fixture
def john_smith(tmp_path):
    return write_workbook(tmp_path / "contacts.xlsx", [contact("John", "Smith", "Acme", "john@acme.test")])


class TestScenarios:
    def test_a_blank_row_is_left_untouched(self, pipeline, store, tmp_path):
        src = write_workbook(tmp_path / "a.xlsx", [
            contact("John", "Smith", "Acme"),
            contact("", "", "", email="nobody@example.test"),
        ])
        result = pipeline.run(src, PipelineOptions(recency_window_months=12))

        rows = read_rows(result.output_path)
        assert rows[0] == tuple(HEADER) + ("Match Status", "Client Code Status", "Date Status")
        assert rows[1][5:] == ("Unmatch", "Unmatch", "Fresh Lead GTG")
        assert rows[2][5:] == (None, None, None)
        assert len(store.queries) == 1
        assert result.stats.rows_skipped == 1

    def test_b_old_record_in_scope_is_cleared(self, pipeline, store, john_smith):
        store.add("JohSmiAcm", "JohnSmitAcme", "C1", THIRTEEN_MONTHS_AGO)
        result = pipeline.run(john_smith, FULL)

        rows = read_rows(result.output_path)
        assert rows[1][5:] == ("Match", "Match", "Suppression Cleared")
        assert result.stats.rows_matched == 1
        assert result.stats.rows_cleared == 1

    def test_c_other_client_does_not_match(self, pipeline, store, john_smith):
        store.add("JohSmiAcm", "JohnSmitAcme", "C1", THIRTEEN_MONTHS_AGO)
        options = PipelineOptions(client_scope_enabled=True, client_code="C2", recency_window_months=12)
        result = pipeline.run(john_smith, options)

        rows = read_rows(result.output_path)
        assert rows[1][5:] == ("Unmatch", "Unmatch", "Fresh Lead GTG")

    def test_recent_record_is_still_suppressed(self, pipeline, store, john_smith):
        store.add("JohSmiAcm", "JohnSmitAcme", "C1", date(2026, 4, 1))
        result = pipeline.run(john_smith, FULL)
        assert read_rows(result.output_path)[1][7] == "Still Suppressed"


class TestVariants:
    def test_single_status_without_window(self, pipeline, store, john_smith):
        store.add("JohSmiAcm", "JohnSmitAcme", "C1", THIRTEEN_MONTHS_AGO)
        result = pipeline.run(john_smith, PipelineOptions(split_status_columns=False))
        rows = read_rows(result.output_path)
        assert rows[0][5:] == ("Status",)
        assert rows[1][5:] == ("Match",)

    def test_split_status_without_window(self, pipeline, john_smith):
        result = pipeline.run(john_smith, PipelineOptions())
        rows = read_rows(result.output_path)
        assert rows[0][5:] == ("Match Status", "Client Code Status")
        assert rows[1][5:] == ("Unmatch", "Unmatch")

    def test_defaults_used_when_options_omitted(self, pipeline, john_smith):
        result = pipeline.run(john_smith)
        assert result.options == PipelineOptions()


class TestRunContract:
    def test_input_file_is_not_modified(self, pipeline, john_smith):
        before = john_smith.read_bytes()
        result = pipeline.run(john_smith, FULL)
        assert john_smith.read_bytes() == before
        assert result.output_path != str(john_smith)

    def test_result_reports_finalized_state(self, pipeline, observer, john_smith):
        result = pipeline.run(john_smith, FULL)
        assert result.state == RunState.FINALIZED
        assert result.started_at == NOW
        assert observer.payloads("state_changed") == ["LOADED", "HEADER_RESOLVED", "STREAMING", "FINALIZED"]
        assert observer.payloads("run_finished") == [(result.output_path, 1)]

    def test_each_run_gets_its_own_output(self, pipeline, john_smith):
        first = pipeline.run(john_smith, FULL)
        second = pipeline.run(john_smith, FULL)
        assert first.output_path != second.output_path
        assert first.run_id != second.run_id


class TestFailures:
    def test_missing_header_aborts_before_any_query(self, pipeline, store, observer, out_dir, tmp_path):
        src = write_workbook(
            tmp_path / "bad.xlsx",
            [["Acme", "Smith"]],
            header=["Company Name", "Last Name"],
        )
        with pytest.raises(MissingColumnsError) as excinfo:
            pipeline.run(src, FULL)
        assert excinfo.value.missing == ["First Name"]
        assert store.queries == []
        assert not out_dir.exists() or not any(out_dir.iterdir())
        assert observer.payloads("state_changed")[-1] == "ABORTED"

    def test_store_outage_leaves_no_output(self, pipeline, store, observer, out_dir, john_smith):
        store.available = False
        with pytest.raises(StoreUnavailableError):
            pipeline.run(john_smith, FULL)
        assert not out_dir.exists() or not any(out_dir.iterdir())
        assert "run_aborted" in observer.names()
        assert "run_finished" not in observer.names()

    def test_unreadable_input_is_malformed(self, pipeline, store, tmp_path):
        src = tmp_path / "broken.xlsx"
        src.write_bytes(b"\x00\x01 definitely not a zip")
        with pytest.raises(MalformedInputError):
            pipeline.run(src, FULL)
        assert store.queries == []

    def test_corrupt_sheet_xml_is_malformed_and_aborts(self, pipeline, store, observer, john_smith):
        truncate_part(john_smith)
        with pytest.raises(MalformedInputError):
            pipeline.run(john_smith, FULL)
        assert store.queries == []
        assert observer.payloads("state_changed") == ["ABORTED"]
        assert isinstance(observer.payloads("run_aborted")[0], MalformedInputError)

    def test_save_failure_aborts_and_leaves_nothing(self, pipeline, observer, out_dir, john_smith, monkeypatch):
        def disk_full(self, filename):
            raise OSError("No space left on device")

        monkeypatch.setattr(openpyxl.Workbook, "save", disk_full)
        with pytest.raises(OSError):
            pipeline.run(john_smith, FULL)
        assert list(out_dir.iterdir()) == []
        assert observer.payloads("state_changed")[-1] == "ABORTED"
        assert isinstance(observer.payloads("run_aborted")[0], OSError)
        assert "run_finished" not in observer.names()


class TestOptions:
    def test_scope_requires_code(self):
        with pytest.raises(ValueError):
            PipelineOptions(client_scope_enabled=True, client_code="  ")

    def test_negative_window_rejected(self):
        with pytest.raises(ValueError):
            PipelineOptions(recency_window_months=-1)

    def test_scope_disabled_ignores_code(self):
        assert PipelineOptions(client_code="C1").client_scope is None


class TestFormulaCells:
    def test_identity_never_uses_formula_text(self, pipeline, store, observer, tmp_path):
        src = write_workbook(tmp_path / "formula.xlsx", [contact('="Jo"&"hn"', "Smith", "Acme")])
        pipeline.run(src, FULL)
        assert store.queries == [("SmiAcm", "SmitAcme", "C1")]
        assert (2, "First Name") in observer.payloads("field_defaulted")

    def test_formulas_survive_in_output(self, pipeline, tmp_path):
        src = write_workbook(tmp_path / "formula.xlsx", [contact('="Jo"&"hn"', "Smith", "Acme")])
        result = pipeline.run(src, FULL)
        assert read_rows(result.output_path)[1][1] == '="Jo"&"hn"'
