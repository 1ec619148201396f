"""Tests for share tokens, share links and clipboard writers."""

import asyncio
import base64
import json
import shutil
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from splitter.models.ledger import Expense, Participant
from splitter.services.sharing import (
    CallableClipboard,
    ClipboardError,
    CommandClipboard,
    DecodeError,
    build_share_link,
    decode,
    encode,
    extract_token,
)


def b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


@pytest.fixture
def state():
    alice = Participant(
        name="Alice",
        created_at=datetime(2024, 3, 1, 9, 30, 15, 123000, tzinfo=timezone.utc),
    )
    zoe = Participant(name="Zoë")
    dinner = Expense(
        description="Dîner à Paris",
        amount=Decimal("90"),
        currency="EUR",
        paid_by=alice.id,
        participants=[alice.id, zoe.id],
    )
    return [alice, zoe], [dinner]


class TestCodec:
    """Tests for encode/decode."""

    def test_round_trip(self, state):
        """Test decode(encode(x)) reproduces roster, expenses and timestamps."""
        roster, expenses = state
        payload = decode(encode(roster, expenses))

        assert payload.friends == roster
        assert payload.expenses == expenses
        assert payload.friends[0].created_at == roster[0].created_at
        assert isinstance(payload.expenses[0].created_at, datetime)
        assert payload.timestamp is not None

    def test_token_is_plain_base64_json(self, state):
        """Test the token is base64 over camelCase JSON."""
        roster, expenses = state
        data = json.loads(base64.b64decode(encode(roster, expenses)).decode("utf-8"))
        assert set(data) == {"friends", "expenses", "timestamp"}
        assert data["expenses"][0]["paidBy"] == roster[0].id
        assert data["expenses"][0]["amount"] == 90

    def test_decodes_browser_token(self):
        """Test a token shaped like the browser client's output."""
        token = b64(json.dumps({
            "friends": [
                {"id": "1700000000001", "name": "Ana", "createdAt": "2024-05-01T10:00:00.000Z"},
                {"id": "1700000000002", "name": "Ben", "createdAt": "2024-05-01T10:00:01.000Z"},
            ],
            "expenses": [{
                "id": "1700000000003",
                "description": "Pizza",
                "amount": 24.5,
                "currency": "USD",
                "paidBy": "1700000000001",
                "participants": ["1700000000001", "1700000000002"],
                "createdAt": "2024-05-01T10:05:00.000Z",
            }],
            "timestamp": "2024-05-01T11:00:00.000Z",
        }))

        payload = decode(token)
        assert [f.name for f in payload.friends] == ["Ana", "Ben"]
        assert payload.expenses[0].amount == Decimal("24.5")
        assert payload.timestamp == datetime(2024, 5, 1, 11, 0, tzinfo=timezone.utc)

    def test_tolerates_missing_padding_and_spaces(self, state):
        """Test tokens mangled by query-string handling still decode."""
        roster, expenses = state
        token = encode(roster, expenses)
        mangled = token.rstrip("=").replace("+", " ")
        assert decode(mangled).friends == roster

    @pytest.mark.parametrize("token,reason", [
        ("", "empty"),
        ("   ", "empty"),
        ("!!!not-base64!!!", "base64"),
        (base64.b64encode(b"\xff\xfe\xfd").decode("ascii"), "encoding"),
        (b64("{not json"), "json"),
        (b64(json.dumps({"friends": []})), "schema"),
        (b64(json.dumps({"friends": "Alice", "expenses": []})), "schema"),
        (b64(json.dumps([1, 2, 3])), "schema"),
    ])
    def test_malformed_tokens_raise(self, token, reason):
        """Test every kind of bad token raises DecodeError."""
        with pytest.raises(DecodeError) as exc:
            decode(token)
        assert exc.value.reason == reason

    def test_rejects_expense_with_no_participants(self):
        token = b64(json.dumps({
            "friends": [],
            "expenses": [{
                "id": "e", "description": "x", "amount": 5, "currency": "USD",
                "paidBy": "a", "participants": [], "createdAt": "2024-05-01T10:00:00Z",
            }],
        }))
        with pytest.raises(DecodeError):
            decode(token)

    @pytest.mark.parametrize("repeat", ["friends", "expenses"])
    def test_rejects_repeated_ids(self, state, repeat):
        """Test a token that lists the same friend or expense twice."""
        roster, expenses = state
        data = json.loads(base64.b64decode(encode(roster, expenses)).decode("utf-8"))
        data[repeat].append(data[repeat][0])

        with pytest.raises(DecodeError) as exc:
            decode(b64(json.dumps(data)))
        assert exc.value.reason == "schema"

    def test_large_amount_round_trips_exactly(self, state):
        """Test amounts a double cannot hold travel as decimal strings."""
        roster, _ = state
        yacht = Expense(
            description="Yacht",
            amount=Decimal("12345678901234567.89"),
            currency="USD",
            paid_by=roster[0].id,
            participants=[roster[0].id],
        )
        token = encode(roster, [yacht])

        data = json.loads(base64.b64decode(token).decode("utf-8"))
        assert data["expenses"][0]["amount"] == "12345678901234567.89"
        assert decode(token).expenses[0].amount == Decimal("12345678901234567.89")


class TestLinks:
    """Tests for share-link helpers."""

    def test_build_and_extract(self, state):
        roster, expenses = state
        token = encode(roster, expenses)
        link = build_share_link("https://split.example.com/app", token)

        assert link.startswith("https://split.example.com/app?token=")
        assert extract_token(link) == token
        assert decode(extract_token(link)).friends == roster

    def test_build_replaces_existing_token(self):
        link = build_share_link("https://x.test/?token=old&lang=en", "new")
        assert extract_token(link) == "new"
        assert "old" not in link
        assert "lang=en" in link

    def test_extract_missing_or_blank(self):
        assert extract_token("https://x.test/") is None
        assert extract_token("https://x.test/?token=") is None
        assert extract_token("https://x.test/?other=1") is None

    def test_custom_param(self):
        link = build_share_link("https://x.test/", "abc", param="s")
        assert extract_token(link, param="s") == "abc"
        assert extract_token(link) is None


class TestClipboard:
    """Tests for clipboard writers."""

    def test_callable_clipboard_sync(self):
        copied = []
        asyncio.run(CallableClipboard(copied.append).write_text("hello"))
        assert copied == ["hello"]

    def test_callable_clipboard_async(self):
        copied = []

        async def write(text):
            copied.append(text)

        asyncio.run(CallableClipboard(write).write_text("hello"))
        assert copied == ["hello"]

    def test_callable_clipboard_failure(self):
        def denied(text):
            raise PermissionError("clipboard access denied")

        with pytest.raises(ClipboardError, match="denied"):
            asyncio.run(CallableClipboard(denied).write_text("hello"))

    def test_command_clipboard_missing_command(self):
        clipboard = CommandClipboard("definitely-not-a-clipboard-tool-xyz")
        with pytest.raises(ClipboardError, match="Cannot run"):
            asyncio.run(clipboard.write_text("hello"))

    @pytest.mark.skipif(shutil.which("cat") is None, reason="needs cat")
    def test_command_clipboard_success(self):
        asyncio.run(CommandClipboard("cat").write_text("hello"))

    @pytest.mark.skipif(shutil.which("false") is None, reason="needs false")
    def test_command_clipboard_nonzero_exit(self):
        with pytest.raises(ClipboardError, match="exited with 1"):
            asyncio.run(CommandClipboard("false").write_text("hello"))

    def test_command_clipboard_empty_command(self):
        with pytest.raises(ValueError):
            CommandClipboard("   ")
