"""
Tests for response cleanup, commit message validation and the consistency pass.
"""

import pytest

from autocommit.errors import BackendFailureError, RefinementFailureError
from autocommit.utils.message_extractor import (
    ConsistencyEnforcer,
    clean_response,
    strip_empty_ticket,
    validate_commit_message,
)


class TestCleanResponse:

    @pytest.mark.parametrize("raw, expected", [
        ("  FEATURE:[ABC-1] Add login  \n", "FEATURE:[ABC-1] Add login"),
        ('"FEATURE: Add login"', "FEATURE: Add login"),
        ("```\nFEATURE: Add login\n```", "FEATURE: Add login"),
        ("```text\nFEATURE: Add login\n- detail\n```", "FEATURE: Add login\n- detail"),
        ("", ""),
        (None, ""),
    ])
    def test_clean(self, raw, expected):
        assert clean_response(raw) == expected

    def test_inner_quotes_survive(self):
        assert clean_response('FIX: Handle "quoted" input') == 'FIX: Handle "quoted" input'


class TestValidateCommitMessage:

    @pytest.mark.parametrize("message, valid", [
        ("FEATURE:[ABC-42] Add login flow", True),
        ("Add login flow", True),
        ("FIX: Restore session handling\n- Keep cookies", True),
        ("feature: add login", False),
        ("", False),
        ("- bullet first", False),
        ("Based on the changes, this adds a login flow.", False),
        ("FEATURE: Add login. Based on the changes above", False),
    ])
    def test_truth_table(self, message, valid):
        assert validate_commit_message(message, "feature/ABC-42", "ABC-42") is valid


class TestStripEmptyTicket:

    @pytest.mark.parametrize("message, expected", [
        ("FEATURE:[] Add login", "FEATURE: Add login"),
        ("FEATURE: [] Add login", "FEATURE: Add login"),
        ("[] Add login", "Add login"),
        ("FEATURE:[ABC-1] Add login", "FEATURE:[ABC-1] Add login"),
        ("FEAT: Handle arr[] args\n- parse list[] values", "FEAT: Handle arr[] args\n- parse list[] values"),
        ("FEAT:[] Accept []\n- default to []", "FEAT: Accept []\n- default to []"),
    ])
    def test_strip(self, message, expected):
        assert strip_empty_ticket(message) == expected


class TestConsistencyEnforcer:

    def test_reformats_raw_message(self, make_backend):
        backend = make_backend("FEATURE:[ABC-42] Add login flow\n- Validate form")
        enforcer = ConsistencyEnforcer(backend)

        refined = enforcer.fix("Based on the changes, this adds login.", "feature/ABC-42", "m", "ABC-42")

        assert refined == "FEATURE:[ABC-42] Add login flow\n- Validate form"
        assert len(backend.calls) == 1
        prompt, model = backend.calls[0]
        assert model == "m"
        assert "Based on the changes, this adds login." in prompt
        assert "CONSISTENCY INSTRUCTIONS" in prompt

    def test_empty_brackets_removed_without_ticket(self, make_backend):
        enforcer = ConsistencyEnforcer(make_backend("FEATURE:[] Add login"))
        assert enforcer.fix("feature: add login", "main", "m") == "FEATURE: Add login"

    def test_brackets_kept_with_ticket(self, make_backend):
        enforcer = ConsistencyEnforcer(make_backend("FEATURE:[ABC-1] Add login"))
        assert enforcer.fix("feature: add login", "ABC-1-login", "m", "ABC-1") == "FEATURE:[ABC-1] Add login"

    def test_empty_refinement_fails(self, make_backend):
        enforcer = ConsistencyEnforcer(make_backend("   "))
        with pytest.raises(RefinementFailureError) as exc_info:
            enforcer.fix("feature: add login", "main", "m")
        assert exc_info.value.exit_code == 8

    def test_only_brackets_fails(self, make_backend):
        enforcer = ConsistencyEnforcer(make_backend("[]"))
        with pytest.raises(RefinementFailureError):
            enforcer.fix("feature: add login", "main", "m")

    def test_backend_error_becomes_backend_failure(self, make_backend):
        backend = make_backend()

        def fail(prompt, model):
            raise RuntimeError("connection reset")

        backend.complete = fail
        with pytest.raises(BackendFailureError) as exc_info:
            ConsistencyEnforcer(backend).fix("feature: add login", "main", "m")
        assert exc_info.value.exit_code == 7
        assert "connection reset" in str(exc_info.value)
