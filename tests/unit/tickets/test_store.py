"""Unit tests for TicketStore."""

from pathlib import Path

import pytest

from ticketmcp.tickets import TicketStore


@pytest.mark.unit
class TestEnumeration:
    """Tests for list_files() and summaries()."""

    def test_list_files(self, store: TicketStore, repo_root: Path) -> None:
        """Only markdown files inside status folders are listed."""
        (repo_root / "tickets" / "INDEX.md").write_text("# Index\n")
        (repo_root / "tickets" / "pending" / "notes.txt").write_text("ignore")

        files = store.list_files()

        assert [p.name for p in files] == [
            "2026-01-01__T-BASE-001__fixture-ticket.md",
            "2026-01-02__T-BASE-042__seed-ticket.md",
            "2026-01-03__T-BASE-100__mismatch-ticket.md",
        ]

    def test_list_files_nested_and_folder_order(self, tmp_path: Path, write_ticket) -> None:
        """Folders are scanned in status order, recursively."""
        write_ticket("archive/2025", "old.md", raw="---\nid: A\n---\n")
        write_ticket("pending", "new.md", raw="---\nid: B\n---\n")

        files = TicketStore(tmp_path).list_files()

        assert [p.name for p in files] == ["new.md", "old.md"]

    def test_empty_store(self, tmp_path: Path) -> None:
        """Missing tickets folder is an empty store."""
        assert TicketStore(tmp_path).list_files() == []

    def test_summaries(self, store: TicketStore) -> None:
        summaries = {s.id: s for s in store.summaries()}

        assert set(summaries) == {"T-BASE-001", "T-BASE-042", "T-BASE-100"}
        assert summaries["T-BASE-001"].title == "Fixture Ticket"
        assert summaries["T-BASE-001"].issues == []
        assert "Folder/status mismatch: pending vs done" in summaries["T-BASE-100"].issues


@pytest.mark.unit
class TestRead:
    """Tests for read() and validate()."""

    def test_read_missing(self, store: TicketStore, repo_root: Path) -> None:
        assert store.read(repo_root / "tickets" / "pending" / "nope.md") is None

    def test_read_folds_feature_into_epic(self, store: TicketStore, write_ticket) -> None:
        path = write_ticket("pending", "legacy.md", raw="---\nid: L-1\nfeature: search\n---\n")

        record = store.read(path)

        assert record is not None
        assert record.frontmatter["epic"] == "search"

    def test_parse_error_reported_by_validate(self, store: TicketStore, write_ticket) -> None:
        path = write_ticket("pending", "broken.md", raw="---\nid: [oops\n---\n# Broken\n")

        record = store.read(path)

        assert record is not None
        assert record.parse_error is not None
        issues = store.validate(record)
        assert issues[-1] == record.parse_error
        assert "Missing required field: id" in issues

    def test_undecodable_file_is_flagged(self, store: TicketStore, write_ticket) -> None:
        path = write_ticket("done", "legacy.md", raw="")
        path.write_bytes(b"---\nid: T-OLD-1\ntitle: caf\xe9\n---\nbody\n")

        record = store.read(path)

        assert record is not None
        assert record.unreadable
        assert record.frontmatter == {}
        assert record.parse_error is not None
        assert record.parse_error.startswith("Failed to read ticket: ")
        assert store.validate(record) == [record.parse_error]

    def test_undecodable_file_does_not_break_scans(
        self, store: TicketStore, write_ticket
    ) -> None:
        write_ticket("done", "legacy.md", raw="").write_bytes(b"---\nid: T-9\n\xe9\n---\n")

        summaries = store.summaries()

        assert len(summaries) == 4
        assert store.find_by_id("T-BASE-042") is not None
        legacy = [s for s in summaries if s.path.name == "legacy.md"]
        assert legacy[0].issues[0].startswith("Failed to read ticket: ")


@pytest.mark.unit
class TestResolve:
    """Tests for resolve() and find_by_id()."""

    def test_resolve_by_id(self, store: TicketStore) -> None:
        path = store.resolve(id="T-BASE-042")

        assert path is not None
        assert path.name == "2026-01-02__T-BASE-042__seed-ticket.md"

    def test_resolve_relative_path(self, store: TicketStore) -> None:
        path = store.resolve(path="tickets/pending/2026-01-01__T-BASE-001__fixture-ticket.md")

        assert path == store.tickets_root / "pending" / "2026-01-01__T-BASE-001__fixture-ticket.md"

    def test_path_wins_over_id(self, store: TicketStore) -> None:
        path = store.resolve(
            id="T-BASE-042",
            path="tickets/pending/2026-01-01__T-BASE-001__fixture-ticket.md",
        )

        assert path is not None
        assert "T-BASE-001" in path.name

    def test_unresolvable(self, store: TicketStore) -> None:
        assert store.resolve(id="T-NOPE") is None
        assert store.resolve(path="tickets/pending/missing.md") is None
        assert store.resolve() is None

    def test_find_by_id_skips_files_without_id(self, store: TicketStore, write_ticket) -> None:
        write_ticket("pending", "0000__no-id.md", raw="---\ntitle: Untitled\n---\n")

        assert store.find_by_id("None") is None


@pytest.mark.unit
class TestWrite:
    """Tests for write() and delete()."""

    def test_write_creates_folders(self, tmp_path: Path, frontmatter_factory) -> None:
        store = TicketStore(tmp_path)
        path = store.folder_path("done") / "deep" / "t.md"

        store.write(path, frontmatter_factory("T-9", "Nine", status="done"), "# Nine\n")

        record = store.read(path)
        assert record is not None
        assert record.frontmatter["id"] == "T-9"
        assert record.body == "# Nine\n"

    def test_delete_missing_is_noop(self, tmp_path: Path) -> None:
        TicketStore(tmp_path).delete(tmp_path / "tickets" / "pending" / "gone.md")
