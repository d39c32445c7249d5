"""
Unit Tests for the Command Line Interface
"""

import json
from dataclasses import replace

import pytest
from openpyxl import load_workbook

from spt_toolkit.cli import main
from spt_toolkit.core.utils.serialization import save_students_json


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("SPT_API_URL", "SPT_TIMEOUT", "SPT_MAX_WORKERS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def students_file(tmp_path, sample_student):
    path = tmp_path / "students.json"
    save_students_json([sample_student], path)
    return path


class TestCli:
    """Tests for main()."""

    def test_compute_when_students_then_json_printed(self, students_file, capsys):
        assert main(["compute", str(students_file)]) == 0

        reports = json.loads(capsys.readouterr().out)
        assert reports[0]["student_id"] == "S1"
        assert reports[0]["coSummary"][0]["coId"] == "CO1"

    def test_compute_when_exclude_policy_then_direct_only(self, students_file, capsys):
        assert main(["--indirect-policy", "exclude", "compute", str(students_file)]) == 0
        reports = json.loads(capsys.readouterr().out)
        assert reports[0]["coSummary"][0]["avgAttainment"] == pytest.approx(64.6)

    def test_compute_when_po_mapping_then_po_summary(self, students_file, tmp_path, capsys):
        mapping = tmp_path / "mapping.json"
        mapping.write_text('{"PO1": {"CO1": 1}}')
        assert main(["compute", str(students_file), "--po-mapping", str(mapping)]) == 0
        reports = json.loads(capsys.readouterr().out)
        assert reports[0]["poSummary"][0]["poId"] == "PO1"

    def test_export_when_excel_then_file_written(self, students_file, tmp_path):
        output = tmp_path / "report.xlsx"
        assert main(["export", str(students_file), "-f", "excel", "-o", str(output)]) == 0
        assert load_workbook(output).sheetnames == ["CSE"]

    def test_semester_when_students_then_pdf_and_json(self, students_file, tmp_path, capsys):
        output = tmp_path / "semester.pdf"
        assert main(["semester", str(students_file), "-o", str(output)]) == 0
        assert output.exists()
        assert json.loads(capsys.readouterr().out)["poAttainment"] == []

    def test_compute_when_department_filter_then_only_matching_students(
        self, tmp_path, sample_student, capsys
    ):
        path = tmp_path / "roster.json"
        other = replace(sample_student, student_id="S2", name="Ben", department="ECE")
        save_students_json([sample_student, other], path)

        assert main(["compute", str(path), "--department", "ec"]) == 0
        reports = json.loads(capsys.readouterr().out)
        assert [r["student_id"] for r in reports] == ["S2"]

    def test_export_when_filter_matches_nothing_then_returns_one(self, students_file, tmp_path):
        output = tmp_path / "report.xlsx"
        assert main(["export", str(students_file), "-o", str(output), "--name", "zzz"]) == 1
        assert not output.exists()

    def test_export_when_no_output_then_written_to_config_output_dir(self, students_file, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"output_dir": str(tmp_path / "out")}))

        assert main(["--config", str(config), "export", str(students_file), "-f", "pdf"]) == 0
        assert (tmp_path / "out" / "StudentPerformance.pdf").exists()

    def test_semester_when_no_output_then_written_to_config_output_dir(self, students_file, tmp_path, capsys):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"output_dir": str(tmp_path / "out")}))

        assert main(["--config", str(config), "semester", str(students_file)]) == 0
        assert (tmp_path / "out" / "SemesterCoPoReport.pdf").exists()

    def test_main_when_file_missing_then_returns_one(self, tmp_path):
        assert main(["compute", str(tmp_path / "missing.json")]) == 1

    def test_main_when_invalid_json_then_returns_one(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{oops")
        assert main(["compute", str(path)]) == 1

    def test_main_when_version_flag_then_project_version_printed(self, capsys):
        with pytest.raises(SystemExit):
            main(["--version"])
        assert capsys.readouterr().out.strip() == "spt-toolkit 0.1.0"

    def test_main_when_no_command_then_usage_error(self):
        with pytest.raises(SystemExit):
            main([])
