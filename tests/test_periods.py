# =============================================================================
# 3PM PORTAL - PERIOD RESOLVER TESTS
# =============================================================================

import pytest
from datetime import date, datetime

from utils.cm_sku.models import Period
from utils.cm_sku.periods import (
    normalize_periods,
    parse_period_range,
    period_label,
    resolve_current_period,
    sort_periods_desc
)


class TestParsePeriodRange:
    """Tests for label parsing."""

    def test_full_month_names(self):
        """Full names give first day of start month to last day of end month."""
        assert parse_period_range('July 2025 to June 2026') == (date(2025, 7, 1), date(2026, 6, 30))

    def test_abbreviated_and_case_insensitive(self):
        """Three-letter month names and odd casing parse the same way."""
        assert parse_period_range('jul 2025 TO JUN 2026') == (date(2025, 7, 1), date(2026, 6, 30))

    def test_leap_year_february(self):
        """End month length follows the calendar."""
        assert parse_period_range('March 2023 to February 2024')[1] == date(2024, 2, 29)

    @pytest.mark.parametrize('label', [
        'FY 2025', '', 'July 2025 - June 2026', 'Julember 2025 to June 2026', None, 42
    ])
    def test_malformed_labels(self, label):
        """Labels outside the pattern return None instead of raising."""
        assert parse_period_range(label) is None

    def test_end_before_start(self):
        """An inverted range is rejected."""
        assert parse_period_range('July 2026 to June 2025') is None


class TestResolveCurrentPeriod:
    """Tests for current period resolution."""

    def test_date_containment(self, periods):
        """The period whose range contains today is current."""
        current = resolve_current_period(periods, today=date(2025, 10, 19))
        assert current.id == 2

    def test_boundaries_inclusive(self, periods):
        """First and last day of a range both belong to it."""
        assert resolve_current_period(periods, today=date(2025, 7, 1)).id == 2
        assert resolve_current_period(periods, today=date(2026, 6, 30)).id == 2

    def test_accepts_datetime(self, periods):
        """A datetime reference is reduced to its date."""
        assert resolve_current_period(periods, today=datetime(2026, 8, 1, 9, 30)).id == 3

    def test_overlap_prefers_highest_id(self):
        """Overlapping ranges resolve to the highest id."""
        overlapping = [
            Period(id=5, label='January 2025 to December 2025'),
            Period(id=7, label='July 2025 to June 2026'),
        ]
        assert resolve_current_period(overlapping, today=date(2025, 9, 1)).id == 7

    def test_year_substring_fallback(self):
        """Without a parseable range, a label containing the year wins."""
        labels = [Period(id=1, label='FY 2024'), Period(id=2, label='FY 2023'), Period(id=3, label='Next')]
        assert resolve_current_period(labels, today=date(2024, 3, 1)).id == 1

    def test_highest_id_fallback(self):
        """Nothing matches: the highest id is used."""
        labels = [Period(id=4, label='Alpha'), Period(id=9, label='Beta'), Period(id=2, label='Gamma')]
        assert resolve_current_period(labels, today=date(2030, 1, 1)).id == 9

    def test_malformed_labels_skipped(self):
        """Malformed labels do not prevent a valid match."""
        mixed = [Period(id=8, label='garbage'), Period(id=2, label='July 2025 to June 2026')]
        assert resolve_current_period(mixed, today=date(2025, 12, 1)).id == 2

    def test_empty(self):
        """No periods means no current period."""
        assert resolve_current_period([]) is None
        assert resolve_current_period(None) is None


class TestNormalizePeriods:
    """Tests for master-data period normalization."""

    def test_mixed_items(self):
        """Dicts and numeric strings are kept, junk is dropped."""
        raw = [
            {'id': 2, 'period': 'July 2025 to June 2026'},
            '3',
            {'id': None, 'period': 'No id'},
            {'id': 'x', 'period': 'Bad id'},
            'abc',
            None,
        ]
        result = normalize_periods(raw)
        assert [p.id for p in result] == [2, 3]
        assert result[0].label == 'July 2025 to June 2026'
        assert result[1].label == '3'

    def test_empty_input(self):
        """None and empty lists normalize to nothing."""
        assert normalize_periods(None) == []
        assert normalize_periods([]) == []


class TestPeriodHelpers:
    """Tests for label lookup and ordering."""

    def test_period_label_lookup(self, periods):
        """Ids map to labels regardless of int/str form."""
        assert period_label(periods, 2) == 'July 2025 to June 2026'
        assert period_label(periods, ' 3 ') == 'July 2026 to June 2027'
        assert period_label(periods, 2.0) == 'July 2025 to June 2026'

    def test_period_label_unknown(self, periods):
        """Unknown ids fall back to the id; missing ids to empty."""
        assert period_label(periods, 99) == '99'
        assert period_label(periods, None) == ''

    def test_sort_desc(self, periods):
        """Most recent period first."""
        assert [p.id for p in sort_periods_desc(reversed(periods))] == [3, 2, 1]
