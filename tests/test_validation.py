"""Tests for score submission and ranking query validation."""

import unittest

from scoreboard.validation import validate_ranking_query, validate_submission


def payload(**overrides):
    data = {"game_id": "nag-won", "stage_id": "cyber-city", "score": 1500, "game_time": 60}
    data.update(overrides)
    return {k: v for k, v in data.items() if v is not ...}


class TestValidateSubmission(unittest.TestCase):
    def assertRejected(self, data, field, code):
        result = validate_submission(data)
        self.assertFalse(result.ok)
        self.assertIn((field, code), [(f.field, f.code) for f in result.failures])

    def test_valid_payload_gets_defaults(self):
        result = validate_submission(payload())

        self.assertTrue(result.ok)
        self.assertEqual(result.submission.items_collected, 0)
        self.assertEqual(result.submission.difficulty, "normal")

    def test_score_boundaries(self):
        self.assertRejected(payload(score=-1), "score", "invalid_range")
        self.assertTrue(validate_submission(payload(score=0)).ok)

    def test_game_time_boundaries(self):
        self.assertRejected(payload(game_time=0), "game_time", "invalid_range")
        self.assertTrue(validate_submission(payload(game_time=1)).ok)

    def test_non_integer_score(self):
        self.assertRejected(payload(score=12.5), "score", "invalid_range")
        self.assertRejected(payload(score="100"), "score", "invalid_range")

    def test_missing_and_empty_ids(self):
        self.assertRejected(payload(game_id=...), "game_id", "missing_field")
        self.assertRejected(payload(game_id=""), "game_id", "missing_field")
        self.assertRejected(payload(stage_id=...), "stage_id", "missing_field")

    def test_long_ids_accepted(self):
        result = validate_submission(payload(game_id="g" * 65, stage_id="s" * 300))
        self.assertTrue(result.ok)
        self.assertEqual(len(result.submission.stage_id), 300)

    def test_difficulty(self):
        self.assertRejected(payload(difficulty="extreme"), "difficulty", "invalid_choice")
        result = validate_submission(payload(difficulty="hard", items_collected=12))
        self.assertTrue(result.ok)
        self.assertEqual(result.submission.difficulty, "hard")
        self.assertEqual(result.submission.items_collected, 12)

    def test_negative_items_collected(self):
        self.assertRejected(payload(items_collected=-3), "items_collected", "invalid_range")

    def test_reports_every_failure(self):
        result = validate_submission({"score": -5})
        fields = {f.field for f in result.failures}
        self.assertEqual(fields, {"game_id", "stage_id", "score", "game_time"})

    def test_non_object_body(self):
        self.assertRejected([1, 2, 3], "body", "invalid_type")


class TestValidateRankingQuery(unittest.TestCase):
    def validate(self, game_id="nag-won", stage_id=None, limit=None, cursor=None):
        return validate_ranking_query(game_id, stage_id, limit, cursor, default_limit=20, max_limit=100)

    def test_defaults(self):
        query = self.validate().query
        self.assertEqual((query.game_id, query.stage_id, query.limit, query.cursor), ("nag-won", None, 20, None))

    def test_game_id_required(self):
        for game_id in (None, "", "   "):
            result = self.validate(game_id=game_id)
            self.assertFalse(result.ok)
            self.assertEqual(result.failures[0].code, "missing_field")

    def test_blank_stage_means_whole_game(self):
        self.assertIsNone(self.validate(stage_id="").query.stage_id)
        self.assertEqual(self.validate(stage_id="forest").query.stage_id, "forest")

    def test_limit_clamped_to_ceiling(self):
        self.assertEqual(self.validate(limit="5000").query.limit, 100)
        self.assertEqual(self.validate(limit="1").query.limit, 1)

    def test_bad_limit_rejected(self):
        self.assertFalse(self.validate(limit="0").ok)
        self.assertFalse(self.validate(limit="-4").ok)
        self.assertFalse(self.validate(limit="ten").ok)

    def test_cursor(self):
        self.assertEqual(self.validate(cursor="42").query.cursor, 42)
        self.assertEqual(self.validate(cursor="").query.cursor, None)
        self.assertEqual(self.validate(cursor="abc").failures[0].code, "invalid_type")
        self.assertEqual(self.validate(cursor="0").failures[0].code, "invalid_range")
