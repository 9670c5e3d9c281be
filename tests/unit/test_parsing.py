"""Tests for qstat output parsers."""

from datetime import datetime

import pytest
from hpc_admin.data.parsing import (
    MalformedTaskLine,
    ParseError,
    parse_job_metadata,
    parse_running_tasks,
    parse_runtime,
    parse_task_line,
    parse_user_jobs,
    parse_walltime,
)


class TestJobMetadata:
    def test_owner_and_runtime(self, sample_job_xml):
        meta = parse_job_metadata("9186455", sample_job_xml)
        assert meta.valid is True
        assert meta.owner == "johndoe"
        assert meta.max_runtime_seconds == 3600

    def test_soft_request_ignored(self, make_job_xml_fn):
        xml = make_job_xml_fn(requests=(("h_vmem", "2G"),))
        meta = parse_job_metadata("9186455", xml)
        # The fixture's soft list asks for h_rt=99999; only hard requests count.
        assert meta.max_runtime_seconds is None

    def test_no_runtime_request(self, sample_job_xml_no_runtime):
        meta = parse_job_metadata("500", sample_job_xml_no_runtime)
        assert meta.valid is True
        assert meta.owner == "alice"
        assert meta.max_runtime_seconds is None

    def test_unknown_job(self, sample_unknown_job_xml):
        meta = parse_job_metadata("999999", sample_unknown_job_xml)
        assert meta.valid is False
        assert meta.owner is None
        assert meta.max_runtime_seconds is None

    def test_custom_runtime_resource(self, make_job_xml_fn):
        xml = make_job_xml_fn(requests=(("s_rt", "120"), ("h_rt", "3600")))
        meta = parse_job_metadata("9186455", xml, runtime_resource="s_rt")
        assert meta.max_runtime_seconds == 120

    def test_malformed_runtime_warns(self, make_job_xml_fn):
        warnings = []
        xml = make_job_xml_fn(requests=(("h_rt", "abc"),))
        meta = parse_job_metadata("9186455", xml, on_warning=warnings.append)
        assert meta.max_runtime_seconds == 0
        assert len(warnings) == 1
        assert "abc" in warnings[0]

    def test_missing_owner_raises(self):
        with pytest.raises(ParseError):
            parse_job_metadata("1", "<detailed_job_info><djob_info></djob_info></detailed_job_info>")


class TestRuntimeParsing:
    def test_plain_seconds(self):
        assert parse_runtime("7200") == 7200

    def test_walltime(self):
        assert parse_runtime("02:00:00") == 7200
        assert parse_runtime("1:00:00:05") == 86405

    def test_leading_digits(self):
        warnings = []
        assert parse_runtime("7200.000000", on_warning=warnings.append) == 7200
        assert len(warnings) == 1

    def test_non_numeric_is_zero(self):
        assert parse_runtime("") == 0
        assert parse_runtime("unlimited") == 0

    def test_parse_walltime_invalid(self):
        assert parse_walltime("1:2") is None
        assert parse_walltime("aa:bb:cc") is None
        assert parse_walltime("-1:00:00") is None
        assert parse_walltime("01:-5:00") is None

    def test_negative_walltime_coerced_to_zero(self):
        warnings = []
        assert parse_runtime("-1:00:00", on_warning=warnings.append) == 0
        assert len(warnings) == 1

    def test_non_ascii_digits_coerced(self):
        warnings = []
        assert parse_runtime("\u00b2", on_warning=warnings.append) == 0
        assert parse_runtime("12\u00b2", on_warning=warnings.append) == 12
        assert len(warnings) == 2

    def test_non_ascii_digits_in_metadata(self, make_job_xml_fn):
        xml = make_job_xml_fn(requests=(("h_rt", "\u00b2"),))
        meta = parse_job_metadata("9186455", xml, on_warning=lambda msg: None)
        assert meta.max_runtime_seconds == 0


class TestTaskLine:
    def test_array_task(self):
        task = parse_task_line(
            "9186455 0.50500 run.sh johndoe r 06/20/2013 20:19:55 all.q@compute-0-1.local 1 7"
        )
        assert task.job_id == "9186455"
        assert task.task_id == 7
        assert task.start_time == datetime(2013, 6, 20, 20, 19, 55)
        assert task.queue == "all.q@compute-0-1.local"
        assert task.slots == "1"
        assert task.user == "johndoe"
        assert task.state == "r"

    def test_missing_task_id_defaults_to_zero(self):
        task = parse_task_line("500 0.50500 single.sh alice r 06/20/2013 20:19:55 all.q@node 4")
        assert task.task_id == 0
        assert task.slots == "4"

    def test_too_few_fields(self):
        with pytest.raises(MalformedTaskLine):
            parse_task_line("500 0.50500 single.sh alice r 06/20/2013 20:19:55")

    def test_too_many_fields(self):
        with pytest.raises(MalformedTaskLine):
            parse_task_line("500 0.5 a b r 06/20/2013 20:19:55 q 1 2 extra")

    def test_bad_task_id(self):
        with pytest.raises(MalformedTaskLine):
            parse_task_line("500 0.5 a b r 06/20/2013 20:19:55 q 1 x")

    def test_bad_start_time(self):
        with pytest.raises(MalformedTaskLine):
            parse_task_line("500 0.5 a b r 2013-06-20 20:19:55 q 1 2")


class TestRunningTasks:
    def test_filters_by_exact_job_id(self, sample_running_tasks):
        tasks = parse_running_tasks("9186455", sample_running_tasks)
        assert [t.task_id for t in tasks] == [1, 2]

    def test_single_task_job(self, sample_running_tasks):
        tasks = parse_running_tasks("500", sample_running_tasks)
        assert len(tasks) == 1
        assert tasks[0].task_id == 0
        assert tasks[0].start_time == datetime(2013, 6, 21, 8, 0, 0)

    def test_no_matches(self, sample_running_tasks):
        assert parse_running_tasks("123", sample_running_tasks) == []
        assert parse_running_tasks("123", "") == []

    def test_malformed_line_skipped(self):
        warnings = []
        output = (
            "42 0.5 a u r 06/20/2013 20:19:55 q 1 1\n"
            "42 0.5 a u r 06/20/2013\n"
            "42 0.5 a u r 06/20/2013 20:19:56 q 1 2\n"
        )
        tasks = parse_running_tasks("42", output, on_warning=warnings.append)
        assert [t.task_id for t in tasks] == [1, 2]
        assert len(warnings) == 1

    def test_duplicate_task_ids_dropped(self):
        warnings = []
        output = (
            "42 0.5 a u r 06/20/2013 20:19:55 q 1 3\n"
            "42 0.5 a u r 06/20/2013 20:20:55 q 1 3\n"
        )
        tasks = parse_running_tasks("42", output, on_warning=warnings.append)
        assert len(tasks) == 1
        assert tasks[0].start_time == datetime(2013, 6, 20, 20, 19, 55)
        assert len(warnings) == 1


class TestUserJobs:
    def test_single_record(self, sample_user_jobs_single):
        assert parse_user_jobs(sample_user_jobs_single) == ["9186455"]

    def test_multiple_records(self, sample_user_jobs_multi):
        assert parse_user_jobs(sample_user_jobs_multi) == ["9186455", "9186455", "9186460"]

    def test_empty(self, sample_user_jobs_empty):
        assert parse_user_jobs(sample_user_jobs_empty) == []
        assert parse_user_jobs("") == []

    def test_single_and_multi_same_type(self, make_user_jobs_xml_fn):
        single = parse_user_jobs(make_user_jobs_xml_fn(["100"]))
        multi = parse_user_jobs(make_user_jobs_xml_fn(["100", "100"]))
        assert type(single) is type(multi)
        assert set(single) == set(multi)
