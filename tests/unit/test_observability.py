"""
Tests for the structured logger and the ObservabilityManager sink.
"""

import json
import logging
import sys
from unittest.mock import patch

import pytest

from forcemerge_orchestrator.cycle_report import CycleOutcome, CycleReport
from forcemerge_orchestrator.logger import (JSONFormatter, ProductionLogger,
                                          get_logger)
from forcemerge_orchestrator.observability import (ObservabilityManager,
                                                   create_observability_manager)
from forcemerge_orchestrator.validation import DenialReason, ValidationOutcome


class TestProductionLogger:

    @pytest.mark.fast
    def test_json_file_output(self, tmp_path):
        logger = ProductionLogger(node_id="node-a", log_dir=tmp_path, console=False)
        try:
            logger.info("Force merge completed", shard_id="idx[0]", cycle_id="abc")
        finally:
            logger.close()

        lines = (tmp_path / "forcemerge.log").read_text().strip().splitlines()
        record = json.loads(lines[-1])
        assert record["message"] == "Force merge completed"
        assert record["node_id"] == "node-a"
        assert record["shard_id"] == "idx[0]"
        assert record["level"] == "INFO"

    @pytest.mark.fast
    def test_level_filters_records(self, tmp_path):
        logger = ProductionLogger(node_id="node-b", log_level="WARNING", log_dir=tmp_path, console=False)
        try:
            logger.info("hidden")
            logger.warning("shown")
        finally:
            logger.close()

        text = (tmp_path / "forcemerge.log").read_text()
        assert "hidden" not in text
        assert "shown" in text

    @pytest.mark.fast
    def test_exception_includes_traceback(self):
        formatter = JSONFormatter("node-c")
        try:
            raise RuntimeError("merge thread died")
        except RuntimeError:
            record = logging.LogRecord("t", logging.ERROR, "", 0, "failed", (), sys.exc_info())

        data = json.loads(formatter.format(record))
        assert data["exception"]["type"] == "RuntimeError"
        assert "merge thread died" in data["exception"]["traceback"]

    @pytest.mark.fast
    def test_node_id_defaults_to_hostname(self):
        logger = ProductionLogger(console=False)
        try:
            assert logger.get_node_id()
        finally:
            logger.close()


class TestObservabilityManager:

    @pytest.mark.fast
    def test_allowed_outcome_not_recorded(self, observer):
        observer.record_denial(ValidationOutcome.allow())
        assert observer.last_denial() is None

    @pytest.mark.fast
    def test_denials_counted_by_reason(self, observer):
        observer.record_denial(ValidationOutcome.deny(DenialReason.CPU))
        observer.record_denial(ValidationOutcome.deny(DenialReason.CPU))
        observer.record_denial(ValidationOutcome.deny(DenialReason.GC_ACTIVE))

        assert observer.denials_for(DenialReason.CPU) == 2
        assert observer.last_denial().reason is DenialReason.GC_ACTIVE
        assert observer.get_summary()["denials"] == {"CPU": 2, "GC_ACTIVE": 1}

    @pytest.mark.fast
    def test_shard_skips_logged_at_debug(self, observer):
        with patch.object(observer.logger, "debug") as mock_debug, patch.object(
            observer.logger, "info"
        ) as mock_info:
            observer.record_denial(ValidationOutcome.deny(DenialReason.TOO_FEW_SEGMENTS), shard_id="s")
            observer.record_denial(ValidationOutcome.deny(DenialReason.MEMORY))

        assert mock_debug.call_count == 1
        assert mock_info.call_count == 1

    @pytest.mark.fast
    def test_cycle_log_carries_denial_reason(self, observer):
        report = CycleReport().finish(CycleOutcome.HALTED, ValidationOutcome.deny(DenialReason.MEMORY))

        with patch.object(observer.logger, "info") as mock_info:
            observer.record_cycle(report)

        assert mock_info.call_args.kwargs["denial"]["reason"] == "MEMORY"

    @pytest.mark.fast
    def test_cycle_history_bounded(self):
        observer = ObservabilityManager(logger=get_logger(node_id="bounded", console=False), history_size=2)
        try:
            for _ in range(3):
                observer.record_cycle(CycleReport().finish(CycleOutcome.NO_CANDIDATES))
            summary = observer.get_summary()
        finally:
            observer.close()

        assert summary["cycles_recorded"] == 2
        assert summary["outcomes"] == {"no_candidates": 3}
        assert summary["last_outcome"] == "no_candidates"

    @pytest.mark.fast
    def test_factory(self, tmp_path):
        observer = create_observability_manager(node_id="factory-node", log_level="DEBUG", log_dir=tmp_path)
        try:
            assert observer.node_id == "factory-node"
            observer.log_debug("debug message")
        finally:
            observer.close()

        assert "debug message" in (tmp_path / "forcemerge.log").read_text()


class TestCycleReport:

    @pytest.mark.fast
    def test_attempted_preserves_candidate_order(self):
        report = CycleReport(candidates=["a", "b", "c"], merged=["c", "a"], failed={"b": "io"})
        assert report.attempted == ["a", "b", "c"]

    @pytest.mark.fast
    def test_to_dict(self):
        report = CycleReport(cycle_id="c1", skipped={"s": DenialReason.NOT_PRIMARY})
        report.finish(CycleOutcome.HALTED, ValidationOutcome.deny(DenialReason.CPU))

        data = report.to_dict()
        assert data["cycle_id"] == "c1"
        assert data["outcome"] == "halted"
        assert data["denial"]["reason"] == "CPU"
        assert data["skipped"] == {"s": "NOT_PRIMARY"}
        assert data["duration_seconds"] >= 0

    @pytest.mark.fast
    def test_unfinished_report_has_no_duration(self):
        assert CycleReport().duration_seconds is None
