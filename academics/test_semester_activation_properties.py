"""
Property-Based Tests for Semester Activation

For any sequence of activations and deactivations over a set of semesters,
at most one semester is active, and right after an activation exactly the
activated semester is active.
"""

from datetime import date

from django.db import IntegrityError, transaction
from hypothesis import given, settings, strategies as st
from hypothesis.extra.django import TestCase

from academics.models import Semester
from academics.services import activate_semester, deactivate_semester, create_semester


def _make_semesters(count):
    return [
        Semester.objects.create(
            name=f"Semester {index + 1}",
            start_date=date(2026, 1, 1),
            end_date=date(2026, 6, 30),
        )
        for index in range(count)
    ]


class SemesterActivationPropertiesTest(TestCase):

    @given(
        semester_count=st.integers(min_value=1, max_value=5),
        operations=st.lists(
            st.tuples(st.sampled_from(['activate', 'deactivate']), st.integers(min_value=0, max_value=4)),
            min_size=1, max_size=12
        )
    )
    @settings(max_examples=40, deadline=None)
    def test_single_active_semester_property(self, semester_count, operations):
        semesters = _make_semesters(semester_count)

        for operation, index in operations:
            target = semesters[index % semester_count]
            if operation == 'activate':
                activate_semester(target)
                active_ids = list(Semester.objects.filter(is_active=True).values_list('id', flat=True))
                self.assertEqual(active_ids, [target.id])
            else:
                deactivate_semester(target)
                self.assertFalse(Semester.objects.get(pk=target.pk).is_active)

            self.assertLessEqual(Semester.objects.filter(is_active=True).count(), 1)

    @given(activations=st.lists(st.integers(min_value=0, max_value=3), min_size=1, max_size=10))
    @settings(max_examples=25, deadline=None)
    def test_last_activation_wins_property(self, activations):
        semesters = _make_semesters(4)
        for index in activations:
            activate_semester(semesters[index])

        self.assertEqual(Semester.get_active().id, semesters[activations[-1]].id)


class SemesterActivationConstraintTest(TestCase):

    def test_database_rejects_second_active_semester(self):
        first, second = _make_semesters(2)
        activate_semester(first)

        second.is_active = True
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                second.save()

    def test_create_active_semester_replaces_current(self):
        existing = _make_semesters(1)[0]
        activate_semester(existing)

        created = create_semester({
            'name': 'Second Semester 2026',
            'start_date': date(2026, 8, 1),
            'end_date': date(2026, 12, 15),
            'is_active': True,
        })

        existing.refresh_from_db()
        self.assertTrue(created.is_active)
        self.assertFalse(existing.is_active)
