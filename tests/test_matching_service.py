import random
import unittest

from santa_redraw.errors import NoValidMatchingError, UnbalancedPoolError
from santa_redraw.schemas import Assignment
from santa_redraw.services.matching_service import find_derangement, repair_self_pairs


class IdentityRandom(random.Random):
    def shuffle(self, x):
        pass


class MatchingServiceTests(unittest.TestCase):
    def test_empty_pools_match_trivially(self):
        self.assertEqual(find_derangement(set(), set(), rng=IdentityRandom()), [])

    def test_single_self_pair_cannot_be_matched(self):
        with self.assertRaises(NoValidMatchingError) as ctx:
            find_derangement({"A"}, {"A"}, rng=random.Random(1))
        self.assertEqual(ctx.exception.attempts, 100)
        self.assertIn("after 100 attempts", str(ctx.exception))

    def test_single_distinct_pair_is_matched(self):
        self.assertEqual(
            find_derangement({"B"}, {"A"}, rng=random.Random(1)),
            [Assignment(giver="B", receiver="A")],
        )

    def test_unequal_pools_are_rejected(self):
        with self.assertRaises(UnbalancedPoolError):
            find_derangement({"A", "B"}, {"C"})

    def test_swap_repairs_a_self_pair(self):
        self.assertEqual(
            find_derangement(["A", "B"], ["A", "B"], rng=IdentityRandom()),
            [Assignment(giver="A", receiver="B"), Assignment(giver="B", receiver="A")],
        )

    def test_self_pair_at_last_position_abandons_trial(self):
        self.assertIsNone(repair_self_pairs(["A", "B", "C"], ["A", "B", "C"]))

        with self.assertRaises(NoValidMatchingError):
            find_derangement(["A", "B", "C"], ["A", "B", "C"], rng=IdentityRandom(), max_attempts=5)

    def test_repair_swaps_with_next_receiver(self):
        pairs = repair_self_pairs(["A", "B", "C"], ["A", "C", "B"])
        self.assertEqual(
            pairs,
            [
                Assignment(giver="A", receiver="C"),
                Assignment(giver="B", receiver="A"),
                Assignment(giver="C", receiver="B"),
            ],
        )

    def test_result_is_a_derangement_for_many_seeds(self):
        people = {f"P{i}" for i in range(7)}
        for seed in range(50):
            pairs = find_derangement(people, people, rng=random.Random(seed))
            self.assertEqual({p.giver for p in pairs}, people)
            self.assertEqual({p.receiver for p in pairs}, people)
            self.assertTrue(all(p.giver != p.receiver for p in pairs))

    def test_same_seed_gives_same_matching(self):
        people = {"Ann", "Bob", "Cid", "Dee"}
        first = find_derangement(people, people, rng=random.Random(42))
        second = find_derangement(people, people, rng=random.Random(42))
        self.assertEqual(first, second)

    def test_default_randomness_is_used_when_none_given(self):
        pairs = find_derangement({"A", "B", "C"}, {"A", "B", "C"})
        self.assertEqual(len(pairs), 3)
        self.assertTrue(all(p.giver != p.receiver for p in pairs))


if __name__ == "__main__":
    unittest.main()
