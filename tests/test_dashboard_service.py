from __future__ import annotations

import unittest
from unittest.mock import patch

from scm.services.dashboard_service import count_by, employees_by_job_title, with_shares


class CountByTests(unittest.TestCase):
    def test_counts_each_label(self) -> None:
        self.assertEqual(count_by(['A', 'A', 'B']), {'A': 2, 'B': 1})

    def test_blank_values_fall_under_default(self) -> None:
        self.assertEqual(count_by([None, '', 'Clerk']), {'Unknown': 2, 'Clerk': 1})

    def test_seeded_labels_come_first_with_zero(self) -> None:
        counts = count_by(['Delivered', 'Cancelled'], seed=('Pending', 'Shifted', 'Delivered'))

        self.assertEqual(list(counts), ['Pending', 'Shifted', 'Delivered', 'Cancelled'])
        self.assertEqual(counts['Pending'], 0)
        self.assertEqual(counts['Delivered'], 1)

    def test_with_shares_handles_empty_total(self) -> None:
        rows = with_shares([{'status': 'Pending', 'value': 0}], value_key='value')
        self.assertEqual(rows[0]['percent'], 0)

    def test_with_shares_percentages(self) -> None:
        rows = with_shares([{'type': 'Orders', 'value': 3}, {'type': 'Returns', 'value': 1}], value_key='value')
        self.assertEqual([row['percent'] for row in rows], [75, 25])

    @patch('scm.services.dashboard_service.list_job_titles')
    def test_employees_by_job_title(self, list_job_titles_mock) -> None:
        list_job_titles_mock.return_value = ['Driver', 'Driver', 'Manager']

        result = employees_by_job_title(db=None)

        self.assertEqual(
            result,
            [
                {'job_title': 'Driver', 'count': 2},
                {'job_title': 'Manager', 'count': 1},
            ],
        )


if __name__ == '__main__':
    unittest.main()
