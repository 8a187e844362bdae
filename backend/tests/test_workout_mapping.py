import unittest
from app.utils.workout_mapping import (
    normalize_fitness_level, fitness_level_to_intensity, difficulty_to_intensity,
    fitness_level_to_api_difficulty, resolve_workout_category, candidate_categories,
    plan_category_for_profile,
)

class TestWorkoutMapping(unittest.TestCase):

    def test_normalize_fitness_level(self):
        self.assertEqual(normalize_fitness_level("Intermediate "), "intermediate")
        self.assertEqual(normalize_fitness_level(None), "beginner")
        self.assertEqual(normalize_fitness_level("elite"), "beginner")

    def test_intensity(self):
        self.assertEqual(fitness_level_to_intensity("beginner"), "light")
        self.assertEqual(fitness_level_to_intensity("advanced"), "intense")
        self.assertEqual(difficulty_to_intensity("expert"), "intense")
        self.assertEqual(difficulty_to_intensity("unknown"), "moderate")
        self.assertEqual(difficulty_to_intensity(None), "moderate")

    def test_api_difficulty(self):
        self.assertEqual(fitness_level_to_api_difficulty("advanced"), "expert")
        self.assertEqual(fitness_level_to_api_difficulty("beginner"), "beginner")

    def test_resolve_category(self):
        # Valid category passes through
        self.assertEqual(resolve_workout_category("free"), "free")
        # Goal string maps to its category
        self.assertEqual(resolve_workout_category("lose_weight"), "weight_loss")
        # Unknown goal falls back to the difficulty level
        self.assertEqual(resolve_workout_category("improve_heart_health", "intermediate"), "intermediate")
        # Nothing usable -> default
        self.assertEqual(resolve_workout_category(None, "expert"), "weight_loss")

    def test_candidate_categories(self):
        self.assertEqual(
            candidate_categories(["lose_weight", "relieve_stress"], "advanced"),
            ["weight_loss", "advanced", "free"],
        )
        self.assertEqual(candidate_categories(None, None), ["beginner", "free"])

    def test_plan_category_for_profile(self):
        self.assertEqual(plan_category_for_profile(["lose_weight"], "advanced"), "weight_loss")
        self.assertEqual(plan_category_for_profile(["relieve_stress"], "advanced"), "advanced")
        self.assertEqual(plan_category_for_profile([], "advanced"), "weight_loss")

if __name__ == '__main__':
    unittest.main()
