"""Tests for verification outcomes and mismatch parsing."""

import itertools

import pytest
from pactbroker.verification import (
    BodyMismatch,
    ExceptionMismatch,
    Failure,
    HeaderMismatch,
    MetadataMismatch,
    Mismatch,
    OtherMismatch,
    StatusMismatch,
    Success,
    VerificationOutcome,
    combine,
    parse_mismatch,
)
from pactbroker.verification.models import combine_descriptions

STATUS_1 = {"type": "status", "interactionId": "i1", "description": "expected 200 but was 500"}
HEADER_2 = {"type": "header", "interactionId": "i2", "key": "Accept", "description": "missing"}
BODY_1 = {"type": "body", "interactionId": "i1", "comparison": "Expected a body"}

SAMPLES = [
    Success(),
    Failure(),
    Failure([STATUS_1], "a"),
    Failure([HEADER_2], "b"),
    Failure([BODY_1, HEADER_2], "a"),
    Failure([], "b"),
]


class TestMergeTable:
    def test_success_merge_success(self):
        assert Success().merge(Success()) == Success()

    def test_success_merge_failure(self):
        failure = Failure([STATUS_1], "failed")
        assert Success().merge(failure) == failure
        assert failure.merge(Success()) == failure

    def test_failures_concatenate_in_order(self):
        merged = Failure([STATUS_1], "a").merge(Failure([HEADER_2], "b"))
        assert isinstance(merged, Failure)
        assert [m.interaction_id for m in merged.mismatches] == ["i1", "i2"]
        assert merged.description == "a, b"

    def test_merged_failure_equals_combined_failure(self):
        merged = Failure([STATUS_1], "a").merge(Failure([HEADER_2], "b"))
        assert merged == Failure([STATUS_1, HEADER_2], combine_descriptions("a", "b"))
        assert merged == Failure([STATUS_1, HEADER_2], ["a", "b"])

    def test_failure_inequality(self):
        assert Failure([STATUS_1], "a") != Failure([STATUS_1], "b")
        assert Failure([STATUS_1], "a") != Failure([HEADER_2], "a")
        assert Failure() != Success()

    @pytest.mark.parametrize(
        "first,second,expected",
        [
            ("same", "same", "same"),
            ("", "only", "only"),
            ("only", "", "only"),
            ("", "", ""),
            ("one", "two", "one, two"),
        ],
    )
    def test_description_combination(self, first, second, expected):
        assert Failure([], first).merge(Failure([], second)).description == expected
        assert combine_descriptions(first, second) == expected


class TestMergeLaws:
    @pytest.mark.parametrize("a,b,c", list(itertools.product(SAMPLES, repeat=3)))
    def test_associative(self, a, b, c):
        assert a.merge(b).merge(c) == a.merge(b.merge(c))

    @pytest.mark.parametrize("a", SAMPLES)
    def test_success_is_identity(self, a):
        assert a.merge(Success()) == a
        assert Success().merge(a) == a

    def test_repeated_descriptions_collapse_regardless_of_grouping(self):
        a, b, c = Failure([], "x"), Failure([], "x"), Failure([], "y")
        assert a.merge(b).merge(c).description == "x, y"
        assert a.merge(b.merge(c)).description == "x, y"


class TestToBoolean:
    @pytest.mark.parametrize("outcome", SAMPLES)
    def test_true_only_for_success(self, outcome):
        assert outcome.to_boolean() is isinstance(outcome, Success)
        assert bool(outcome) is outcome.to_boolean()

    def test_from_boolean(self):
        assert VerificationOutcome.from_boolean(True) == Success()
        assert VerificationOutcome.from_boolean(False) == Failure()

    def test_combine(self):
        assert combine([]) == Success()
        assert combine([Success(), Success()]) == Success()
        merged = combine([Success(), Failure([STATUS_1], "a"), Success(), Failure([HEADER_2], "b")])
        assert merged == Failure([STATUS_1, HEADER_2], "a, b")


class TestAbstractBases:
    def test_outcome_base_is_abstract(self):
        with pytest.raises(TypeError):
            VerificationOutcome()

    def test_mismatch_base_is_abstract(self):
        with pytest.raises(TypeError):
            Mismatch("i1")


class TestParseMismatch:
    def test_body(self):
        mismatch = parse_mismatch(BODY_1)
        assert mismatch == BodyMismatch("i1", "Expected a body")

    def test_status(self):
        assert parse_mismatch(STATUS_1) == StatusMismatch("i1", "expected 200 but was 500")

    def test_header_keeps_other_fields(self):
        assert parse_mismatch(HEADER_2) == HeaderMismatch(
            "i2", {"key": "Accept", "description": "missing"}
        )

    def test_metadata(self):
        mismatch = parse_mismatch({"type": "metadata", "contentType": "expected json"})
        assert mismatch == MetadataMismatch(None, {"contentType": "expected json"})

    def test_unknown_type(self):
        mismatch = parse_mismatch({"type": "query", "interactionId": "i3", "parameter": "page"})
        assert mismatch == OtherMismatch("i3", "query", {"parameter": "page"})

    def test_exception_wins_over_type(self):
        error = ValueError("boom")
        mismatch = parse_mismatch({"type": "status", "interactionId": "i4", "exception": error})
        assert isinstance(mismatch, ExceptionMismatch)
        assert mismatch.exception is error
        assert mismatch.entries() == []

    def test_parsed_variants_pass_through(self):
        status = StatusMismatch("i1", "x")
        assert parse_mismatch(status) is status
        assert Failure([status]).mismatches == (status,)
