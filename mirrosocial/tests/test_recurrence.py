import unittest
from datetime import date

from mirrosocial.recurrence import (
    RepeatRule,
    describe_rule,
    format_days_of_week,
    parse_days_of_week,
    upcoming_occurrences,
    validate_rule,
)


class RecurrenceTests(unittest.TestCase):
    def test_parse_and_format_days(self):
        self.assertEqual(parse_days_of_week("5, 1,1"), [1, 5])
        self.assertEqual(parse_days_of_week(""), [])
        self.assertEqual(format_days_of_week([5, 1]), "1,5")
        self.assertIsNone(format_days_of_week([]))
        with self.assertRaises(ValueError):
            parse_days_of_week("7")

    def test_single_event_has_one_occurrence(self):
        start = date(2030, 1, 1)
        self.assertEqual(upcoming_occurrences(start, None, 5), [start])
        self.assertEqual(describe_rule(None), "")

    def test_monthly_clamps_to_month_end(self):
        rule = RepeatRule(pattern="monthly")
        dates = upcoming_occurrences(date(2030, 1, 31), rule, 3)
        self.assertEqual(dates, [date(2030, 1, 31), date(2030, 2, 28), date(2030, 3, 31)])

    def test_weekly_on_selected_days(self):
        # 2030-01-01 is a Tuesday; Monday=1 and Friday=5 in Sunday-first numbering.
        rule = RepeatRule(pattern="weekly", days_of_week=[1, 5])
        dates = upcoming_occurrences(date(2030, 1, 1), rule, 4)
        self.assertEqual(
            dates,
            [date(2030, 1, 1), date(2030, 1, 4), date(2030, 1, 7), date(2030, 1, 11)],
        )
        self.assertEqual(describe_rule(rule), "Every week on Mon, Fri")

    def test_end_date_stops_series(self):
        rule = RepeatRule(pattern="daily", end_date=date(2030, 1, 3))
        dates = upcoming_occurrences(date(2030, 1, 1), rule, 10)
        self.assertEqual(len(dates), 3)
        self.assertEqual(describe_rule(rule), "Every day until 2030-01-03")

    def test_yearly_interval(self):
        rule = RepeatRule(pattern="yearly", interval=2)
        dates = upcoming_occurrences(date(2028, 2, 29), rule, 2)
        self.assertEqual(dates, [date(2028, 2, 29), date(2030, 2, 28)])
        self.assertEqual(describe_rule(rule), "Every 2 years")

    def test_validate_rule(self):
        start = date(2030, 1, 10)
        validate_rule(RepeatRule(pattern="weekly", days_of_week=[0]), start)
        with self.assertRaises(ValueError):
            validate_rule(RepeatRule(pattern="hourly"), start)
        with self.assertRaises(ValueError):
            validate_rule(RepeatRule(pattern="daily", interval=0), start)
        with self.assertRaises(ValueError):
            validate_rule(RepeatRule(pattern="daily", end_date=date(2030, 1, 1)), start)

    def test_days_of_week_ignored_for_non_weekly_rules(self):
        start = date(2030, 1, 31)
        rule = RepeatRule(pattern="monthly", days_of_week=[1, 3])
        validate_rule(rule, start)
        self.assertEqual(
            upcoming_occurrences(start, rule, 2), [date(2030, 1, 31), date(2030, 2, 28)]
        )
        self.assertEqual(describe_rule(rule), "Every month")


if __name__ == "__main__":
    unittest.main()
