"""Tests for individual CLI commands."""

import pytest

from bankrecon.cli.main import cli


@pytest.fixture
def invoke(cli_runner, temp_db):
    def _invoke(*args):
        return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])

    return _invoke


def test_help_does_not_need_a_database(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "reconciliation" in result.output


def test_invalid_log_level(invoke):
    result = invoke("--log-level", "chatty", "transaction", "list")
    assert result.exit_code != 0


class TestTransactionCommands:
    """Tests for the transaction command group."""

    def test_show_unknown_transaction(self, invoke):
        result = invoke("transaction", "show", "missing")
        assert result.exit_code == 1
        assert "Transaction missing not found" in result.output

    def test_show(self, invoke, make_transaction):
        make_transaction(party_name="Mercure Medi Surge Pvt Ltd")
        result = invoke("transaction", "show", "T1")
        assert result.exit_code == 0
        assert "Party: Mercure Medi Surge Pvt Ltd" in result.output
        assert "State: pending" in result.output

    def test_add(self, invoke, temp_db, mapping_service):
        result = invoke(
            "transaction",
            "add",
            "--date", "04/11/2025",
            "--amount", "1,500.00",
            "--type", "CR",
            "--narration", "NEFT CR-SBIN0002776-MERCURE MEDI SURGE-SBINN52025110406690875",
            "--party", "Mercure Medi Surge Pvt Ltd",
            "--id", "M1",
        )

        assert result.exit_code == 0
        assert "Added transaction M1" in result.output
        stored = temp_db.get_transaction("M1")
        assert stored.date.isoformat() == "2025-11-04"
        assert stored.amount == 1500
        assert stored.kind.value == "credit"
        assert stored.party_name == "Mercure Medi Surge Pvt Ltd"
        assert mapping_service.resolve("mercure medi surge") == "Mercure Medi Surge Pvt Ltd"

    def test_add_skips_existing_record(self, invoke, make_transaction):
        make_transaction(narration="CHQ 004512 ANIL TRADERS - 998877", amount="900.00")

        result = invoke(
            "transaction",
            "add",
            "--date", "2025-11-04",
            "--amount", "900",
            "--type", "credit",
            "--narration", "CHQ 004512 ANIL TRADERS - 998877",
        )

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert "Found 1 transaction(s)" in invoke("transaction", "list").output

    def test_add_rejects_unknown_type(self, invoke, temp_db):
        result = invoke(
            "transaction", "add", "--date", "today", "--amount", "10", "--type", "refund", "--narration", "X"
        )
        assert result.exit_code == 1
        assert "Unknown transaction type 'refund'" in result.output
        assert temp_db.list_transactions() == []

    def test_hold_and_unhold(self, invoke, make_transaction, temp_db):
        make_transaction()

        result = invoke("transaction", "hold", "T1")
        assert result.exit_code == 0
        assert "(hold)" in result.output
        assert temp_db.get_transaction("T1").hold

        result = invoke("transaction", "unhold", "T1")
        assert result.exit_code == 0
        assert not temp_db.get_transaction("T1").hold

    def test_confirm_requires_party(self, invoke, make_transaction):
        make_transaction()
        result = invoke("transaction", "confirm", "T1", "--reference", "INV-1")
        assert result.exit_code == 1
        assert "party name is required" in result.output

    def test_self_transfer_blocks_confirm(self, invoke, make_transaction):
        make_transaction(party_name="Own Account")
        invoke("transaction", "self-transfer", "T1")

        result = invoke("transaction", "confirm", "T1", "--reference", "INV-1")
        assert result.exit_code == 1
        assert "self transfer" in result.output

    def test_added_then_unchecked(self, invoke, make_transaction, temp_db):
        make_transaction(party_name="Anil Traders")
        invoke("transaction", "reference", "T1", "INV-7")

        result = invoke("transaction", "added", "T1")
        assert result.exit_code == 0
        assert "(completed)" in result.output

        result = invoke("transaction", "added", "T1", "--unchecked")
        assert result.exit_code == 0
        assert temp_db.get_transaction("T1").external_reference == ""

    def test_notes(self, invoke, make_transaction, temp_db):
        make_transaction()
        assert invoke("transaction", "notes", "T1", "call accounts").exit_code == 0
        assert temp_db.get_transaction("T1").notes == "call accounts"

    def test_list_filters(self, invoke, make_transaction):
        make_transaction(narration="CHQ 004512 ANIL TRADERS - 998877")
        make_transaction()

        result = invoke("transaction", "list", "--search", "anil")
        assert "Found 1 transaction(s)" in result.output
        assert "T1" in result.output

        result = invoke("transaction", "list", "--state", "completed")
        assert "No transactions found." in result.output

    def test_list_rejects_two_periods(self, invoke):
        result = invoke("transaction", "list", "--this-month", "--last-year")
        assert result.exit_code == 1
        assert "Only one period option" in result.output

    def test_apply_suggestion_without_any(self, invoke, make_transaction):
        make_transaction(narration="CASH DEPOSIT BY SELF")
        result = invoke("transaction", "apply-suggestion", "T1")
        assert result.exit_code == 1
        assert "No suggestion available" in result.output


class TestMappingCommands:
    """Tests for the mapping command group."""

    def test_list_and_delete(self, invoke, mapping_service):
        mapping = mapping_service.upsert("anil traders", "Anil Traders Pvt Ltd")

        result = invoke("mapping", "list", "--sort", "confidence")
        assert "anil traders" in result.output

        result = invoke("mapping", "delete", str(mapping.id))
        assert result.exit_code == 0
        assert invoke("mapping", "list").output.strip() == "No mappings found."

    def test_update_needs_a_change(self, invoke):
        result = invoke("mapping", "update", "1")
        assert result.exit_code == 1
        assert "Nothing to update" in result.output

    def test_delete_unknown(self, invoke):
        result = invoke("mapping", "delete", "999")
        assert result.exit_code == 1
        assert "Mapping 999 not found" in result.output

    def test_resolve_without_mapping_lists_candidates(self, invoke):
        result = invoke("mapping", "resolve", "NEFT CR-SBIN0002776-MERCURE MEDI SURGE-SBINN52025110406690875")
        assert "No mapping found." in result.output
        assert "mercure medi surge" in result.output


class TestDirectoryCommands:
    """Tests for the directory command group."""

    def test_add_duplicate(self, invoke):
        assert invoke("directory", "add", "Apollo Pharmacy").exit_code == 0
        result = invoke("directory", "add", "apollo pharmacy")
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_match(self, invoke):
        invoke("directory", "add", "Apollo Pharmacy")
        invoke("directory", "add", "Sri Balaji Pharmacy")

        result = invoke(
            "directory",
            "match",
            "SRI RAJA RAJESHWARI ORTHO PLUS CR - 50200090155304 - SRI BALAJI PHARMACY",
        )
        assert result.output.splitlines()[0] == "1. Sri Balaji Pharmacy"

    def test_list_and_remove(self, invoke, directory_service):
        entry_id = directory_service.add_party("Apollo Pharmacy")
        assert "Apollo Pharmacy" in invoke("directory", "list").output

        assert invoke("directory", "remove", str(entry_id)).exit_code == 0
        assert "No parties found." in invoke("directory", "list").output
