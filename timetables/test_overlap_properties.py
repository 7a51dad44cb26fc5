"""
Property-Based Tests for Timetable Overlap

slots_overlap agrees with a brute-force intersection of the minutes each slot
covers, and no sequence of slot insertions leaves two slots of a timetable
overlapping on the same day.
"""

from datetime import date, time
from types import SimpleNamespace
import unittest

from hypothesis import given, settings, strategies as st
from hypothesis.extra.django import TestCase

from academics.models import Course, Department, Semester
from portal.exceptions import SlotConflict
from timetables.models import Timetable
from timetables.overlap import find_conflicting_pairs, find_overlaps, slots_overlap
from timetables.services import add_slot

DAYS = ['MON', 'TUE', 'WED']


def _time(minutes):
    return time(minutes // 60, minutes % 60)


@st.composite
def intervals(draw):
    start = draw(st.integers(min_value=0, max_value=24 * 60 - 2))
    end = draw(st.integers(min_value=start + 1, max_value=24 * 60 - 1))
    return start, end


@st.composite
def slot_specs(draw):
    start, end = draw(intervals())
    return SimpleNamespace(day_of_week=draw(st.sampled_from(DAYS)), start_time=_time(start), end_time=_time(end))


def _minutes(slot):
    start = slot.start_time.hour * 60 + slot.start_time.minute
    end = slot.end_time.hour * 60 + slot.end_time.minute
    return set(range(start, end))


class OverlapRulePropertiesTest(unittest.TestCase):

    @given(a=intervals(), b=intervals())
    @settings(max_examples=300)
    def test_overlap_matches_minute_intersection_property(self, a, b):
        brute_force = bool(set(range(*a)) & set(range(*b)))
        self.assertEqual(slots_overlap(a[0], a[1], b[0], b[1]), brute_force)
        self.assertEqual(slots_overlap(_time(a[0]), _time(a[1]), _time(b[0]), _time(b[1])), brute_force)

    @given(a=intervals(), b=intervals())
    def test_overlap_is_symmetric_property(self, a, b):
        self.assertEqual(slots_overlap(a[0], a[1], b[0], b[1]), slots_overlap(b[0], b[1], a[0], a[1]))

    @given(candidate=slot_specs(), existing=st.lists(slot_specs(), max_size=8))
    def test_find_overlaps_property(self, candidate, existing):
        expected = [
            slot for slot in existing
            if slot.day_of_week == candidate.day_of_week and _minutes(slot) & _minutes(candidate)
        ]
        self.assertEqual(find_overlaps(candidate, existing), expected)

    @given(slots=st.lists(slot_specs(), max_size=8))
    def test_conflicting_pairs_property(self, slots):
        pairs = find_conflicting_pairs(slots)
        expected_count = sum(
            1
            for i, first in enumerate(slots)
            for second in slots[i + 1:]
            if first.day_of_week == second.day_of_week and _minutes(first) & _minutes(second)
        )
        self.assertEqual(len(pairs), expected_count)

    def test_back_to_back_slots_do_not_overlap(self):
        self.assertFalse(slots_overlap(time(8), time(10), time(10), time(12)))

    def test_all_four_overlap_shapes(self):
        start, end = time(9), time(11)
        self.assertTrue(slots_overlap(start, end, time(10), time(12)))   # starts inside
        self.assertTrue(slots_overlap(start, end, time(8), time(10)))    # ends inside
        self.assertTrue(slots_overlap(start, end, time(8), time(12)))    # contains
        self.assertTrue(slots_overlap(start, end, time(9, 30), time(10)))  # contained
        self.assertTrue(slots_overlap(start, end, start, end))           # identical


class SlotInsertionPropertiesTest(TestCase):

    def setUp(self):
        department = Department.objects.create(name="Computer Science", code="CS")
        self.course = Course.objects.create(code="CS201", title="Data Structures", department=department, credits=3)
        self.semester = Semester.objects.create(
            name="First Semester 2026", start_date=date(2026, 1, 10), end_date=date(2026, 5, 30)
        )

    @given(candidates=st.lists(slot_specs(), min_size=1, max_size=10))
    @settings(max_examples=30, deadline=None)
    def test_timetable_never_holds_overlapping_slots_property(self, candidates):
        timetable = Timetable.objects.create(name="CS 200 Level", semester=self.semester)
        accepted = []

        for candidate in candidates:
            should_conflict = bool(find_overlaps(candidate, accepted))
            try:
                add_slot(timetable, {
                    'course': self.course,
                    'day_of_week': candidate.day_of_week,
                    'start_time': candidate.start_time,
                    'end_time': candidate.end_time,
                })
            except SlotConflict:
                self.assertTrue(should_conflict)
            else:
                self.assertFalse(should_conflict)
                accepted.append(candidate)

        self.assertEqual(timetable.get_conflicts(), [])
        self.assertEqual(timetable.slots.count(), len(accepted))
