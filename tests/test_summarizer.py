"""Tests for grievance aggregation."""

from testivus import Disappointment, ReportRow, summarize


def test_scenario_a(scenario_a):
    summary = summarize(scenario_a.snapshot())
    assert summary.total == 3
    assert summary.by_tag == {"speed": 2, "download": 1}
    assert summary.by_name == {"A": 3}
    assert summary.by_error == {}
    assert summary.tag_rows == (ReportRow("speed", 2), ReportRow("download", 1))


def test_scenario_b(scenario_b):
    summary = summarize(scenario_b.snapshot())
    assert summary.total == 4
    assert summary.by_error == {"timeout exceeded": 1}
    assert summary.by_tag == {"speed": 3, "download": 1}
    assert summary.by_name == {"A": 3, "B": 1}
    assert summary.name_rows == (ReportRow("A", 3), ReportRow("B", 1))
    assert summary.error_rows == (ReportRow("timeout exceeded", 1),)


def test_empty_is_clean():
    summary = summarize({})
    assert summary.total == 0
    assert summary.is_clean
    assert summary.tag_rows == summary.name_rows == summary.error_rows == ()


def test_total_counts_every_record():
    grievances = {
        f"test_{i}": [Disappointment(f"test_{i}", f"m{k}") for k in range(i + 1)]
        for i in range(6)
    }
    assert summarize(grievances).total == sum(range(1, 7))


def test_ties_keep_discovery_order_not_alphabetical():
    grievances = {
        "test_z": [Disappointment("test_z", "m", ["zeta"])],
        "test_a": [Disappointment("test_a", "m", ["alpha"])],
    }
    summary = summarize(grievances)
    assert [row.id for row in summary.tag_rows] == ["zeta", "alpha"]
    assert [row.id for row in summary.name_rows] == ["test_z", "test_a"]


def test_rows_sorted_by_count_then_discovery():
    grievances = {
        "A": [
            Disappointment("A", "1", ["rare"]),
            Disappointment("A", "2", ["tie-1", "common"]),
            Disappointment("A", "3", ["tie-2", "common"]),
            Disappointment("A", "4", ["common", "tie-1", "tie-2"]),
        ],
    }
    summary = summarize(grievances)
    assert [(row.id, row.count) for row in summary.tag_rows] == [
        ("common", 3),
        ("tie-1", 2),
        ("tie-2", 2),
        ("rare", 1),
    ]
    counts = [row.count for row in summary.tag_rows]
    assert counts == sorted(counts, reverse=True)


def test_records_without_error_not_in_by_error():
    grievances = {
        "A": [
            Disappointment("A", "ok"),
            Disappointment("A", "bad", error="boom"),
            Disappointment("A", "worse", error="boom"),
            Disappointment("B", "other", error="crash"),
        ],
    }
    summary = summarize(grievances)
    assert summary.by_error == {"boom": 2, "crash": 1}
    assert None not in summary.by_error


def test_by_tag_counts_each_record_once():
    handle = Disappointment("A", "m", ["speed", "speed"])
    handle.add_tags("speed")
    assert summarize({"A": [handle]}).by_tag == {"speed": 1}
