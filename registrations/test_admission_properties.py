"""
Property-Based Tests for Admission Rules

For any credit load and candidate course, admission is accepted exactly when
the course carries at least the minimum credits and the new total stays within
the semester limit. Registration status aggregation follows the course upload
statuses.
"""

from django.test import SimpleTestCase, override_settings
from hypothesis import given, settings, strategies as st

from registrations.admission import (
    aggregate_registration_status, can_admit_course, counts_toward_load,
    is_duplicate_upload, total_credits, APPROVED, PENDING, REJECTED
)

credit_lists = st.lists(st.integers(min_value=0, max_value=12), max_size=10)
statuses = st.sampled_from([PENDING, APPROVED, REJECTED])


class AdmissionPropertiesTest(SimpleTestCase):

    @given(existing=credit_lists, candidate=st.integers(min_value=0, max_value=30))
    @settings(max_examples=200)
    def test_admission_matches_credit_bounds_property(self, existing, candidate):
        admitted, reason = can_admit_course(existing, candidate)

        expected = candidate >= 3 and sum(existing) + candidate <= 24
        self.assertEqual(admitted, expected)
        self.assertEqual(reason == '', expected)

    @given(
        existing=credit_lists,
        candidate=st.integers(min_value=0, max_value=30),
        min_credits=st.integers(min_value=0, max_value=6),
        max_credits=st.integers(min_value=0, max_value=40),
    )
    def test_explicit_bounds_override_policy_property(self, existing, candidate, min_credits, max_credits):
        admitted, _ = can_admit_course(existing, candidate, min_credits=min_credits, max_credits=max_credits)

        self.assertEqual(admitted, candidate >= min_credits and sum(existing) + candidate <= max_credits)

    @given(existing=credit_lists, candidate=st.integers(min_value=3, max_value=12))
    def test_admitted_load_never_exceeds_limit_property(self, existing, candidate):
        admitted, _ = can_admit_course(existing, candidate)
        if admitted:
            self.assertLessEqual(total_credits(existing) + candidate, 24)

    @given(status_list=st.lists(statuses, max_size=8))
    def test_status_aggregation_property(self, status_list):
        result = aggregate_registration_status(status_list)

        if not status_list:
            self.assertEqual(result, PENDING)
        elif all(s == APPROVED for s in status_list):
            self.assertEqual(result, APPROVED)
        elif PENDING in status_list:
            self.assertEqual(result, PENDING)
        else:
            self.assertEqual(result, REJECTED)

        # Approved iff every upload is approved and there is at least one
        self.assertEqual(result == APPROVED, bool(status_list) and set(status_list) == {APPROVED})

    @given(
        triples=st.lists(st.tuples(st.integers(1, 5), st.integers(1, 3), st.integers(1, 10)), max_size=10),
        candidate=st.tuples(st.integers(1, 5), st.integers(1, 3), st.integers(1, 10)),
    )
    def test_duplicate_detection_is_exact_membership_property(self, triples, candidate):
        self.assertEqual(is_duplicate_upload(triples, candidate), candidate in triples)


class AdmissionExamplesTest(SimpleTestCase):

    def test_two_credit_course_rejected_regardless_of_load(self):
        admitted, reason = can_admit_course([], 2)
        self.assertFalse(admitted)
        self.assertIn('minimum', reason)

    def test_load_twenty_plus_five_rejected(self):
        admitted, reason = can_admit_course([10, 10], 5)
        self.assertFalse(admitted)
        self.assertIn('24', reason)

    def test_load_twenty_plus_four_accepted(self):
        self.assertEqual(can_admit_course([10, 10], 4), (True, ''))

    def test_same_course_in_other_semester_is_not_duplicate(self):
        self.assertFalse(is_duplicate_upload([('s1', 'sem1', 'c1')], ('s1', 'sem2', 'c1')))

    def test_only_pending_and_approved_count_toward_load(self):
        self.assertTrue(counts_toward_load(PENDING))
        self.assertTrue(counts_toward_load(APPROVED))
        self.assertFalse(counts_toward_load(REJECTED))

    @override_settings(REGISTRATION_POLICY={
        'MIN_COURSE_CREDITS': 1, 'MAX_TERM_CREDITS': 10, 'CARD_PREFIX': 'BU', 'CARD_NUMBER_ATTEMPTS': 5,
    })
    def test_policy_comes_from_settings(self):
        self.assertTrue(can_admit_course([], 2)[0])
        self.assertFalse(can_admit_course([8], 3)[0])
