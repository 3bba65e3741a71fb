"""Tests for lesson credit selection."""
from datetime import datetime, timedelta, timezone

import pytest

from polyface.core.exceptions import NoAvailableCreditError
from polyface.domains.packages.models import CreditType, LessonCredit
from polyface.domains.packages.selector import (
    CreditPurpose,
    credit_options,
    select_credit,
    usable_credits,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_credit(
    credit_id: str | None,
    expires_in: timedelta,
    total: int = 1,
    used: int = 0,
    credit_type: CreditType = CreditType.SINGLE,
) -> LessonCredit:
    return LessonCredit(
        id=credit_id,
        credit_type=credit_type,
        total_credits=total,
        used_credits=used,
        purchase_date=NOW - timedelta(days=30),
        expiration_date=NOW + expires_in,
    )


class TestSelectCredit:
    """Tests for the soonest-expiring selection policy."""

    def test_picks_soonest_expiring_usable_credit(self):
        t = timedelta(days=1)
        credits = [
            make_credit("later", t + timedelta(days=10)),
            make_credit("sooner", t + timedelta(days=5)),
            make_credit("exhausted", t + timedelta(days=30), total=1, used=1),
        ]

        assert select_credit(credits, CreditPurpose.LESSON, now=NOW) == "sooner"

    def test_exhausted_credit_never_selected(self):
        credits = [make_credit("empty", timedelta(days=5), total=5, used=5)]

        with pytest.raises(NoAvailableCreditError):
            select_credit(credits, CreditPurpose.LESSON, now=NOW)

    def test_expired_credit_never_selected(self):
        credits = [make_credit("old", -timedelta(seconds=1), total=5, used=0)]

        with pytest.raises(NoAvailableCreditError):
            select_credit(credits, CreditPurpose.LESSON, now=NOW)

    def test_credit_expiring_exactly_now_is_usable(self):
        credits = [make_credit("edge", timedelta(0))]

        assert select_credit(credits, CreditPurpose.LESSON, now=NOW) == "edge"

    def test_no_credits_raises(self):
        with pytest.raises(NoAvailableCreditError) as exc:
            select_credit([], CreditPurpose.LESSON, now=NOW)

        assert exc.value.purchase_required is False

    def test_explicit_credit_id_returned_unchanged(self):
        credits = [
            make_credit("good", timedelta(days=5)),
            make_credit("expired", -timedelta(days=5)),
        ]

        assert select_credit(credits, CreditPurpose.LESSON, credit_id="expired", now=NOW) == "expired"

    def test_explicit_credit_id_not_required_to_exist(self):
        assert select_credit([], CreditPurpose.LESSON, credit_id="unknown", now=NOW) == "unknown"

    def test_empty_explicit_credit_id_falls_back_to_auto(self):
        credits = [make_credit("only", timedelta(days=5))]

        assert select_credit(credits, CreditPurpose.LESSON, credit_id="", now=NOW) == "only"

    def test_lesson_booking_ignores_class_passes(self):
        credits = [
            make_credit("pass", timedelta(days=1), credit_type=CreditType.CLASS_PASS),
            make_credit("lesson", timedelta(days=9)),
        ]

        assert select_credit(credits, CreditPurpose.LESSON, now=NOW) == "lesson"

    def test_class_registration_only_uses_class_passes(self):
        credits = [
            make_credit("lesson", timedelta(days=1), credit_type=CreditType.TWO_ATHLETE),
            make_credit("pass", timedelta(days=9), credit_type=CreditType.CLASS_PASS),
        ]

        assert select_credit(credits, CreditPurpose.CLASS, now=NOW) == "pass"

    def test_class_registration_without_pass_requires_purchase(self):
        credits = [make_credit("lesson", timedelta(days=1))]

        with pytest.raises(NoAvailableCreditError) as exc:
            select_credit(credits, CreditPurpose.CLASS, now=NOW)

        assert exc.value.purchase_required is True
        assert "class pass" in exc.value.message

    def test_equal_expiration_breaks_tie_on_lowest_id(self):
        credits = [
            make_credit("b", timedelta(days=5)),
            make_credit("a", timedelta(days=5)),
            make_credit("c", timedelta(days=5)),
        ]

        assert select_credit(credits, CreditPurpose.LESSON, now=NOW) == "a"

    def test_tie_break_is_independent_of_input_order(self):
        first = [make_credit("x2", timedelta(days=5)), make_credit("x1", timedelta(days=5))]

        assert select_credit(first, CreditPurpose.LESSON, now=NOW) == select_credit(
            list(reversed(first)), CreditPurpose.LESSON, now=NOW
        )

    def test_selection_does_not_mutate_credits(self):
        credit = make_credit("only", timedelta(days=5), total=3, used=1)

        select_credit([credit], CreditPurpose.LESSON, now=NOW)

        assert credit.used_credits == 1
        assert credit.remaining == 2


class TestUsableCredits:
    def test_sorted_by_expiration(self):
        credits = [
            make_credit("c", timedelta(days=30)),
            make_credit("a", timedelta(days=3)),
            make_credit("b", timedelta(days=10)),
        ]

        assert [c.id for c in usable_credits(credits, CreditPurpose.LESSON, now=NOW)] == ["a", "b", "c"]

    def test_credits_without_id_sort_after_equal_expiration(self):
        credits = [make_credit(None, timedelta(days=5)), make_credit("z", timedelta(days=5))]

        assert [c.id for c in usable_credits(credits, CreditPurpose.LESSON, now=NOW)] == ["z", None]


class TestCreditOptions:
    """The picker is only shown when there is more than one candidate."""

    def test_single_candidate_is_auto_selected(self):
        options = credit_options([make_credit("only", timedelta(days=5))], CreditPurpose.LESSON, now=NOW)

        assert options.selection_required is False
        assert options.default_credit_id == "only"

    def test_multiple_candidates_require_selection(self):
        credits = [make_credit("a", timedelta(days=10)), make_credit("b", timedelta(days=3))]

        options = credit_options(credits, CreditPurpose.LESSON, now=NOW)

        assert options.selection_required is True
        assert options.default_credit_id == "b"
        assert [c.id for c in options.candidates] == ["b", "a"]

    def test_no_candidates(self):
        options = credit_options([], CreditPurpose.CLASS, now=NOW)

        assert options.candidates == []
        assert options.default_credit_id is None
        assert options.selection_required is False
