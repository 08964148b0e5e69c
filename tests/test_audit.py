"""Tests for per-incident audit records."""

import pytest
import yaml

from appcat_regress.audit import AuditWriter, load_record, record_file_name
from appcat_regress.exceptions import AnalysisError, OutputWriteError
from appcat_regress.models import Incident


class TestRecordFileName:
    def test_plain_rule(self):
        assert record_file_name("cloud-readiness", "local-storage-00001", 3) == (
            "cloud-readiness_local-storage-00001_3.incident"
        )

    def test_unsafe_characters_replaced(self):
        assert record_file_name("rs", "a/b c", 0) == "rs_a_b_c_0.incident"

    def test_without_rule_set(self):
        assert record_file_name("", "rule", 1) == "rule_1.incident"


class TestAuditWriter:
    def test_record_uses_analyzer_field_names(self, tmp_path):
        incident = Incident(
            rule_set="cloud-readiness",
            rule="local-storage-00001",
            uri="/repo/proj1/A.java",
            message="Use managed storage",
            code_snip="new File(path)",
            line_number=12,
            variables={"file": "A.java"},
        )
        writer = AuditWriter(tmp_path / "records")
        path = writer.write(incident, 0)

        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert list(raw) == ["ruleSet", "rule", "uri", "message", "codeSnip", "variables", "lineNumber"]
        assert raw["lineNumber"] == 12
        assert writer.written == 1
        assert load_record(path) == incident

    def test_scalar_variables_survive(self, tmp_path):
        incident = Incident("rs", "r", "/u", "m", variables="plain")
        path = AuditWriter(tmp_path).write(incident, 1)
        assert load_record(path).variables == "plain"

    def test_same_rule_in_two_rule_sets_kept_apart(self, tmp_path):
        writer = AuditWriter(tmp_path)
        first = writer.write(Incident("rs1", "rule", "/u", "one"), 0)
        second = writer.write(Incident("rs2", "rule", "/u", "two"), 0)
        assert first != second
        assert load_record(first).message == "one"
        assert load_record(second).message == "two"

    def test_clashing_names_get_a_suffix(self, tmp_path):
        writer = AuditWriter(tmp_path)
        paths = [
            writer.write(Incident("rs", "a/b", "/u", "slash"), 0),
            writer.write(Incident("rs", "a_b", "/u", "underscore"), 0),
            writer.write(Incident("rs", "a b", "/u", "space"), 0),
        ]
        assert [p.name for p in paths] == [
            "rs_a_b_0.incident", "rs_a_b_0_1.incident", "rs_a_b_0_2.incident",
        ]
        assert writer.written == len(list(tmp_path.glob("*.incident"))) == 3
        assert [load_record(p).message for p in paths] == ["slash", "underscore", "space"]

    def test_blocked_directory_raises_output_write_error(self, tmp_path):
        blocked = tmp_path / "records"
        blocked.write_text("not a folder", encoding="utf-8")
        writer = AuditWriter(blocked)
        with pytest.raises(OutputWriteError) as excinfo:
            writer.write(Incident("rs", "r", "/u", "m"), 0)
        assert isinstance(excinfo.value, AnalysisError)
        assert writer.written == 0


class TestLoadRecord:
    def test_null_fields_become_empty_strings(self, tmp_path):
        path = tmp_path / "r_0.incident"
        path.write_text(
            "ruleSet: null\nrule: r\nuri: null\nmessage: null\ncodeSnip: null\n"
            "variables: null\nlineNumber: '12'\n",
            encoding="utf-8",
        )
        incident = load_record(path)
        assert incident.rule_set == ""
        assert incident.uri == ""
        assert incident.message == ""
        assert incident.code_snip == ""
        assert incident.line_number == 12

    def test_non_numeric_line_is_unspecified(self, tmp_path):
        path = tmp_path / "r_0.incident"
        path.write_text("rule: r\nlineNumber: abc\n", encoding="utf-8")
        assert load_record(path).line_number is None
