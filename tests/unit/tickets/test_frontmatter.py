"""Unit tests for the frontmatter codec."""

import pytest

from ticketmcp.tickets.frontmatter import decode, encode, order_frontmatter, split_header
from ticketmcp.tickets.schema import TicketStatus


@pytest.mark.unit
class TestDecode:
    """Tests for decode()."""

    def test_decode_header_and_body(self) -> None:
        """Splits mapping header from body and strips leading body whitespace."""
        parsed = decode("---\nid: T-1\ntitle: Hello\n---\n\n# Hello\n")

        assert parsed.error is None
        assert parsed.frontmatter == {"id": "T-1", "title": "Hello"}
        assert parsed.body == "# Hello\n"

    def test_decode_without_header(self) -> None:
        """Text with no header is all body."""
        parsed = decode("# Just a body\n")

        assert parsed.frontmatter == {}
        assert parsed.body == "# Just a body\n"
        assert parsed.error is None

    def test_decode_keeps_timestamps_as_strings(self) -> None:
        """ISO timestamps and dates stay strings."""
        parsed = decode("---\ncreated_at: 2026-01-01T00:00:00Z\nday: 2026-01-02\n---\nbody")

        assert parsed.frontmatter["created_at"] == "2026-01-01T00:00:00Z"
        assert parsed.frontmatter["day"] == "2026-01-02"

    def test_decode_only_true_false_are_booleans(self) -> None:
        """yes/no/on/off are plain words, true/false are booleans."""
        parsed = decode("---\nepic: no\narea: on\nflag: true\nother: False\n---\nbody")

        assert parsed.frontmatter == {"epic": "no", "area": "on", "flag": True, "other": False}

    def test_decode_invalid_yaml(self) -> None:
        """Malformed YAML yields empty frontmatter and an error."""
        parsed = decode("---\nid: [unclosed\n---\nbody text")

        assert parsed.frontmatter == {}
        assert parsed.error is not None
        assert parsed.error.startswith("YAML parse error:")
        assert parsed.body == "body text"

    def test_decode_non_mapping_header(self) -> None:
        """A list header is a parse error."""
        parsed = decode("---\n- a\n- b\n---\nbody")

        assert parsed.frontmatter == {}
        assert parsed.error is not None
        assert "mapping" in parsed.error

    def test_decode_empty_header(self) -> None:
        """An empty header decodes to an empty mapping."""
        parsed = decode("---\n---\nbody")

        assert parsed.frontmatter == {}
        assert parsed.error is None
        assert parsed.body == "body"

    def test_decode_crlf(self) -> None:
        """Windows line endings are accepted."""
        parsed = decode("---\r\nid: T-1\r\n---\r\nbody")

        assert parsed.frontmatter == {"id": "T-1"}
        assert parsed.body == "body"


@pytest.mark.unit
class TestEncode:
    """Tests for encode()."""

    def test_encode_layout(self) -> None:
        """Header, delimiter, blank line, body."""
        text = encode({"id": "T-1", "title": "Hello"}, "# Hello\n")

        assert text == "---\nid: T-1\ntitle: Hello\n---\n\n# Hello\n"

    def test_encode_orders_canonical_keys_first(self) -> None:
        """Known keys follow the canonical order; extras keep insertion order after them."""
        text = encode({"zeta": 1, "title": "t", "id": "T-1", "alpha": 2}, "")

        header = text.split("---\n")[1]
        keys = [line.split(":")[0] for line in header.splitlines()]
        assert keys == ["id", "title", "zeta", "alpha"]

    def test_encode_null_and_lists(self) -> None:
        """None is written as null and lists in block style."""
        text = encode({"claimed_by": None, "key_files": ["a.py", "b.py"]}, "")

        assert "claimed_by: null" in text
        assert "key_files:\n- a.py\n- b.py" in text

    def test_encode_enum_values(self) -> None:
        """Enum members are written as their values."""
        text = encode({"status": TicketStatus.IN_PROGRESS}, "")

        assert "status: in_progress" in text

    def test_encode_then_decode(self) -> None:
        """A written ticket reads back to the same data."""
        frontmatter = {
            "id": "T-1",
            "created_at": "2026-01-01T00:00:00Z",
            "work_log": [{"at": "2026-01-01T00:00:00Z", "actor": "me", "kind": "note"}],
        }

        parsed = decode(encode(frontmatter, "# Body\n"))

        assert parsed.frontmatter == frontmatter
        assert parsed.body == "# Body\n"

    def test_encode_quotes_ambiguous_strings(self) -> None:
        """Strings that look like other YAML types survive."""
        frontmatter = {"id": "001", "epic": "null", "title": "yes"}

        parsed = decode(encode(frontmatter, ""))

        assert parsed.frontmatter == frontmatter


@pytest.mark.unit
class TestHelpers:
    """Tests for order_frontmatter() and split_header()."""

    def test_order_frontmatter_copies(self) -> None:
        """Original mapping is not modified."""
        original = {"title": "t", "id": "x"}

        ordered = order_frontmatter(original)

        assert list(ordered) == ["id", "title"]
        assert list(original) == ["title", "id"]

    def test_split_header_verbatim(self) -> None:
        """Header block is returned unchanged, including its delimiters."""
        raw = "---\nid: T-1   # comment\n---\n\nBody\n"

        parts = split_header(raw)

        assert parts == ("---\nid: T-1   # comment\n---\n", "\nBody\n")

    def test_split_header_missing(self) -> None:
        """No header gives None."""
        assert split_header("Body only") is None
