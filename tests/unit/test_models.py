"""Unit tests for the fetch, outcome, index and cache models."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from fetchgate.models import (
    CacheEntry,
    FetchBatch,
    IndexedVersion,
    ItemClassification,
    ItemOutcome,
    ItemStatus,
    RunOutcome,
    RunReport,
    SweepReport,
)


class TestFetchItem:
    def test_dest_name(self, make_item):
        item = make_item(dest_file="/var/cache/hello_1.0_amd64.deb")
        assert item.dest_name == "hello_1.0_amd64.deb"

    def test_status_assignment_is_validated(self, make_item):
        item = make_item()
        item.status = "done"
        assert item.status == ItemStatus.DONE
        with pytest.raises(ValidationError):
            item.status = "exploded"

    def test_succeeded_needs_done_and_complete(self, make_item):
        assert not make_item(status=ItemStatus.DONE).succeeded
        assert make_item(status=ItemStatus.DONE, complete=True).succeeded


class TestFetchBatch:
    def test_order_is_preserved(self, make_item):
        batch = FetchBatch()
        for name in ("c", "a", "b"):
            batch.add(make_item(name))
        assert [i.short_desc for i in batch] == ["c", "a", "b"]
        assert len(batch) == 3

    def test_items_is_a_copy(self, make_batch, make_item):
        batch = make_batch("a")
        batch.items.append(make_item("b"))
        assert len(batch) == 1

    def test_uri_entries_fall_back_to_desc_uri(self, make_item):
        batch = FetchBatch(
            [
                make_item("a", uris=["http://one/a.deb", "http://two/a.deb"]),
                make_item("b", desc_uri="http://one/b.deb"),
            ]
        )
        assert [uri for uri, _ in batch.uri_entries()] == [
            "http://one/a.deb",
            "http://two/a.deb",
            "http://one/b.deb",
        ]

    def test_fetch_needed_skips_complete_and_local(self, make_item):
        batch = FetchBatch(
            [
                make_item("a", file_size=100),
                make_item("b", file_size=200, complete=True),
                make_item("c", file_size=400, local=True),
            ]
        )
        assert batch.fetch_needed() == 100


class TestRunReport:
    def _outcome(self, position, classification):
        return ItemOutcome(
            position=position,
            short_desc=f"p{position}",
            uri=f"http://h/p{position}",
            classification=classification,
        )

    def test_flags(self):
        report = RunReport(
            outcome=RunOutcome.SUCCEEDED,
            items=[
                self._outcome(0, ItemClassification.DONE),
                self._outcome(1, ItemClassification.TRANSIENT_NETWORK_FAILURE),
            ],
        )
        assert report.ran
        assert report.transient_network_failure
        assert not report.failed

    def test_report_is_frozen(self):
        report = RunReport(outcome=RunOutcome.FAILED)
        with pytest.raises(ValidationError):
            report.outcome = RunOutcome.SUCCEEDED


class TestIndexedVersion:
    def test_source_name_defaults_to_name(self):
        record = IndexedVersion(name="hello", version="1.0", architecture="amd64")
        assert record.source_name == "hello"
        assert record.spec == "hello=1.0"
        assert record.fetchable is True

    def test_explicit_source(self):
        record = IndexedVersion(
            name="libhello1", version="1.0", architecture="amd64", source="hello"
        )
        assert record.source_name == "hello"


class TestSweepReport:
    def test_freed_bytes(self, tmp_path):
        def entry(size):
            return CacheEntry(
                path=tmp_path / f"p{size}", name="p", version="1", architecture="all", size=size
            )

        report = SweepReport(directory=Path(tmp_path), kept=[entry(5)], removed=[entry(10), entry(20)])
        assert report.freed_bytes == 30
        assert report.simulated is False
