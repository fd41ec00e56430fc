import logging

from engine.grouping import GroupKey, group_counts, group_records, majority_vote, reconcile_expanded
from engine.sorting import by_key, priority_order

BY_ID = by_key(lambda r: r["id"])

RECORDS = [
    {"id": "3", "lob": "Premium", "cycle": "Annual"},
    {"id": "1", "lob": "premium", "cycle": "Monthly"},
    {"id": "5", "lob": "LTS", "cycle": None},
    {"id": "2", "lob": None, "cycle": "Quarterly"},
    {"id": "4", "lob": "LSS", "cycle": "Monthly"},
]

KEYS = {
    "LOB": GroupKey(extract=lambda r: r["lob"]),
    "Cycle": GroupKey(
        extract=lambda r: r["cycle"],
        order=priority_order(("Monthly", "Annual", "Quarterly")),
        missing_label="No cycle",
    ),
}


def test_none_means_ungrouped():
    assert group_records(RECORDS, "None", KEYS, BY_ID) is None
    assert group_counts(None) is None


def test_unknown_key_logs_and_stays_ungrouped(caplog):
    with caplog.at_level(logging.WARNING):
        assert group_records(RECORDS, "Colour", KEYS, BY_ID) is None
    assert "Colour" in caplog.text


def test_alphabetical_partitions_missing_last():
    groups = group_records(RECORDS, "LOB", KEYS, BY_ID)
    assert list(groups) == ["LSS", "LTS", "Premium", "premium", "Other"]
    assert [r["id"] for r in groups["Other"]] == ["2"]


def test_ordinal_partitions_and_sorted_members():
    groups = group_records(RECORDS, "Cycle", KEYS, BY_ID)
    assert list(groups) == ["Monthly", "Annual", "Quarterly", "No cycle"]
    assert [r["id"] for r in groups["Monthly"]] == ["1", "4"]
    assert group_counts(groups) == {"Monthly": 2, "Annual": 1, "Quarterly": 1, "No cycle": 1}


def test_grouping_is_complete_without_duplicates():
    for key in KEYS:
        groups = group_records(RECORDS, key, KEYS, BY_ID)
        members = [r["id"] for part in groups.values() for r in part]
        assert sorted(members) == sorted(r["id"] for r in RECORDS)


def test_majority_vote_ties_alphabetical():
    assert majority_vote(["iOS", "Desktop", "iOS"]) == "iOS"
    assert majority_vote(["iOS", "Desktop"]) == "Desktop"
    assert majority_vote([None, ""]) is None


def test_partition_identity_survives_resort():
    by_id_desc = by_key(lambda r: r["id"], descending=True)
    asc = group_records(RECORDS, "LOB", KEYS, BY_ID)
    desc = group_records(RECORDS, "LOB", KEYS, by_id_desc)
    assert list(asc) == list(desc)

    expanded = reconcile_expanded({"LSS", "Gone"}, desc)
    assert expanded == {"LSS"}
    assert reconcile_expanded({"LSS"}, None) == {"LSS"}
