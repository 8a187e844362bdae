import unittest
from app.utils.walking_calc import (
    calculate_step_progression, calculate_pace_seconds_per_km, calculate_calories,
    format_pace, get_base_duration, calculate_bmi, classify_bmi,
)

class TestWalkingCalc(unittest.TestCase):

    def test_step_progression_respects_level_minimum(self):
        # Goal below the beginner floor is lifted to 5000
        self.assertEqual(calculate_step_progression(3000, "beginner"), (5000, 250))
        self.assertEqual(calculate_step_progression(6000, "beginner"), (6000, 300))
        self.assertEqual(calculate_step_progression(None, "intermediate"), (7500, 375))
        self.assertEqual(calculate_step_progression(8000, "advanced"), (10000, 500))

    def test_step_increment_rounds_down(self):
        # 5% of 6130 = 306.5
        self.assertEqual(calculate_step_progression(6130, "beginner"), (6130, 306))

    def test_pace_seconds_per_km(self):
        self.assertEqual(calculate_pace_seconds_per_km(90, 500), 180.0)
        self.assertIsNone(calculate_pace_seconds_per_km(90, 0))
        self.assertIsNone(calculate_pace_seconds_per_km(0, 500))
        self.assertIsNone(calculate_pace_seconds_per_km(90, None))

    def test_format_pace(self):
        self.assertEqual(format_pace(30, 5), "6:00/km")
        self.assertEqual(format_pace(33, 6), "5:30/km")
        self.assertIsNone(format_pace(30, 0))

    def test_calories_default_weight(self):
        # 30 min * 70 kg * 0.05
        self.assertEqual(calculate_calories(30), 105)
        self.assertEqual(calculate_calories(30, 80.0), 120)

    def test_base_duration(self):
        self.assertEqual(get_base_duration("less_than_20_mins"), 15)
        self.assertEqual(get_base_duration("20_60_mins"), 30)
        self.assertEqual(get_base_duration(None), 25)

    def test_bmi(self):
        self.assertEqual(calculate_bmi(70, 175), 22.9)
        self.assertEqual(classify_bmi(17.0), "underweight")
        self.assertEqual(classify_bmi(22.9), "normal")
        self.assertEqual(classify_bmi(27.0), "overweight")
        self.assertEqual(classify_bmi(31.0), "obese")

if __name__ == '__main__':
    unittest.main()
