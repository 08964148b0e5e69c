"""Tests for parsing analyzer output into normalized incident sets."""

import pytest

from appcat_regress.audit import AuditWriter, load_record
from appcat_regress.exceptions import InputMissingError, MalformedInputError
from appcat_regress.parser import (
    load_document,
    parse_document,
    parse_line_number,
    parse_output_file,
)

from .helpers import make_incident, make_rule_set, write_document


class TestLoadDocument:
    def test_missing_file(self, tmp_path):
        with pytest.raises(InputMissingError):
            load_document(tmp_path / "output.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "output.yaml"
        path.write_text("- name: [unclosed\n", encoding="utf-8")
        with pytest.raises(MalformedInputError):
            load_document(path)

    def test_top_level_mapping_is_malformed(self, tmp_path):
        path = tmp_path / "output.yaml"
        path.write_text("name: security\n", encoding="utf-8")
        with pytest.raises(MalformedInputError) as exc:
            load_document(path)
        assert "list of rule-sets" in exc.value.reason

    def test_empty_file_is_empty_document(self, tmp_path):
        path = tmp_path / "output.yaml"
        path.write_text("", encoding="utf-8")
        assert load_document(path) == []


class TestParseLineNumber:
    @pytest.mark.parametrize(
        "raw, expected",
        [(10, 10), ("42", 42), (" 7 ", 7), (3.0, 3), (None, None), ("abc", None),
         (True, None), (2.5, None), ({"line": 1}, None), ("-3", -3), ("+4", 4),
         ("--5", None), ("+-1", None), ("\u00b2", None), ("\u0663", None), ("", None)],
    )
    def test_values(self, raw, expected):
        assert parse_line_number(raw) == expected


class TestParseDocument:
    def test_single_incident(self, security_document):
        result = parse_document(security_document, "proj1")
        assert result.total == 1
        assert result.rule_counts == {"sql-injection": 1}
        key = "security-sql-injection-proj1/src/A.java-10"
        assert list(result.incidents) == [key]
        incident = result.incidents[key]
        assert incident.rule_set == "security"
        assert incident.message == "M"
        assert incident.line_number == 10
        assert incident.variables == {"file": "A.java"}

    def test_empty_document(self):
        result = parse_document([], "proj1")
        assert result.total == 0
        assert len(result) == 0
        assert result.rule_counts == {}

    def test_rule_set_without_violations(self):
        doc = [{"name": "empty"}, {"name": "also-empty", "violations": None}]
        result = parse_document(doc, "proj1")
        assert result.total == 0

    def test_violation_with_empty_incidents(self):
        doc = [{"name": "rs", "violations": {"rule-a": {"incidents": []}, "rule-b": {}}}]
        result = parse_document(doc, "proj1")
        assert result.total == 0
        assert result.rule_counts == {}

    def test_duplicate_keeps_first(self):
        doc = [make_rule_set("rs", {"rule": [
            make_incident(message="first"),
            make_incident(message="second"),
        ]})]
        result = parse_document(doc, "proj1")
        assert len(result) == 1
        assert next(iter(result.incidents.values())).message == "first"
        assert result.duplicates == ("rs-rule-proj1/src/A.java-10",)
        # Duplicates still count as occurrences
        assert result.total == 2
        assert result.rule_counts == {"rule": 2}

    def test_duplicate_is_logged(self, caplog, quiet_logger):
        doc = [make_rule_set("rs", {"rule": [make_incident(), make_incident()]})]
        with caplog.at_level("INFO", logger=quiet_logger.name):
            parse_document(doc, "proj1", logger=quiet_logger)
        assert "Duplicate incident dropped" in caplog.text

    def test_total_equals_sum_of_rule_counts(self):
        doc = [
            make_rule_set("rs1", {"a": [make_incident(line=1), make_incident(line=2)],
                                  "b": [make_incident(line=3)]}),
            make_rule_set("rs2", {"a": [make_incident(line=4)]}),
        ]
        result = parse_document(doc, "proj1")
        assert result.total == sum(result.rule_counts.values()) == 4
        assert result.rule_counts == {"a": 3, "b": 1}

    def test_same_rule_in_two_rule_sets_gets_distinct_keys(self):
        doc = [
            make_rule_set("rs1", {"a": [make_incident()]}),
            make_rule_set("rs2", {"a": [make_incident()]}),
        ]
        result = parse_document(doc, "proj1")
        assert len(result) == 2
        assert result.duplicates == ()

    def test_missing_fields_default(self):
        doc = [make_rule_set("rs", {"rule": [{"uri": "/x/proj1/A.java"}]})]
        result = parse_document(doc, "proj1")
        incident = next(iter(result.incidents.values()))
        assert incident.message == ""
        assert incident.line_number is None
        assert incident.variables is None
        assert "rs-rule-proj1/A.java-0" in result

    @pytest.mark.parametrize("raw", ["--5", "+-1", "²", "ten"])
    def test_non_numeric_line_is_unspecified(self, raw):
        doc = [make_rule_set("rs", {"rule": [make_incident(line=raw)]})]
        result = parse_document(doc, "proj1")
        assert next(iter(result.incidents.values())).line_number is None
        assert "rs-rule-proj1/src/A.java-0" in result

    def test_empty_sections_logged_to_injected_logger(self, caplog, quiet_logger):
        doc = [{"name": "rs", "violations": None},
               {"name": "rs2", "violations": {"rule": {"incidents": []}}}]
        with caplog.at_level("DEBUG", logger=quiet_logger.name):
            parse_document(doc, "proj1", logger=quiet_logger)
        names = {record.name for record in caplog.records}
        assert names == {quiet_logger.name}
        assert "No violations in rule-set 'rs'" in caplog.text
        assert "No incidents for rule 'rule'" in caplog.text

    def test_keys_stable_across_reparse(self, security_document):
        first = parse_document(security_document, "proj1")
        second = parse_document(security_document, "proj1")
        assert first.keys() == second.keys()

    @pytest.mark.parametrize(
        "doc",
        [
            ["not a mapping"],
            [{"name": "rs", "violations": ["x"]}],
            [{"name": "rs", "violations": {"rule": "x"}}],
            [{"name": "rs", "violations": {"rule": {"incidents": "x"}}}],
            [{"name": "rs", "violations": {"rule": {"incidents": ["x"]}}}],
        ],
    )
    def test_malformed_shapes(self, doc):
        with pytest.raises(MalformedInputError):
            parse_document(doc, "proj1")

    def test_malformed_document_writes_no_audit_records(self, tmp_path):
        doc = [
            make_rule_set("rs", {"rule": [make_incident()]}),
            {"name": "broken", "violations": {"rule": {"incidents": ["x"]}}},
        ]
        writer = AuditWriter(tmp_path / "audit")
        with pytest.raises(MalformedInputError):
            parse_document(doc, "proj1", audit_writer=writer)
        assert writer.written == 0


class TestParseOutputFile:
    def test_writes_audit_records(self, tmp_path, security_document):
        path = write_document(tmp_path / "output.yaml", security_document)
        writer = AuditWriter(tmp_path / "audit")
        result = parse_output_file(path, "proj1", audit_writer=writer)

        assert result.total == 1
        record_path = tmp_path / "audit" / "security_sql-injection_0.incident"
        assert record_path.exists()
        incident = load_record(record_path)
        assert incident == next(iter(result.incidents.values()))

    def test_missing_file(self, tmp_path):
        with pytest.raises(InputMissingError):
            parse_output_file(tmp_path / "nope.yaml", "proj1")
