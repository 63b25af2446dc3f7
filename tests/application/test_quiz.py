"""Tests for multiple-choice quiz composition."""

import random

import pytest

from medace.application.quiz import build_question, compose_quiz, quiz_score


@pytest.fixture
def rng():
    return random.Random(1234)


class TestComposeQuiz:
    def test_each_question_has_answer_and_three_distractors(self, words, rng):
        questions = compose_quiz(words, 10, rng)

        assert len(questions) == 10
        for question in questions:
            assert question.answer == question.word.definition
            assert len(question.options) == 4
            assert question.options.count(question.answer) == 1
            assert len(set(question.options)) == 4
            assert set(question.options) <= {w.definition for w in words}

    def test_targets_are_distinct_and_capped_by_size(self, words, rng):
        questions = compose_quiz(words, 4, rng)
        assert len(questions) == 4
        assert len({q.word.id for q in questions}) == 4

    def test_size_larger_than_book(self, words, rng):
        questions = compose_quiz(words[:3], 10, rng)
        assert sorted(q.word.id for q in questions) == sorted(w.id for w in words[:3])

    def test_small_book_gives_fewer_options(self, words, rng):
        questions = compose_quiz(words[:3], 10, rng)
        assert all(len(q.options) == 3 for q in questions)

        single = compose_quiz(words[:1], 10, rng)
        assert single[0].options == (words[0].definition,)

    def test_empty_book_or_no_size(self, words, rng):
        assert compose_quiz([], 10, rng) == []
        assert compose_quiz(words, 0, rng) == []

    def test_same_seed_same_quiz(self, words):
        first = compose_quiz(words, 5, random.Random(7))
        second = compose_quiz(words, 5, random.Random(7))
        assert first == second

    def test_duplicate_words_are_asked_once(self, words, rng):
        questions = compose_quiz([words[0], words[0], words[1]], 10, rng)
        assert len(questions) == 2


class TestBuildQuestion:
    def test_distractors_never_repeat_answer_text(self, make_word, rng):
        target = make_word(1, definition="to give up")
        twin = make_word(2, definition="to give up")
        other = make_word(3, definition="to bear")

        question = build_question(target, [target, twin, other], rng)

        assert sorted(question.options) == ["to bear", "to give up"]

    def test_is_correct(self, words, rng):
        question = build_question(words[0], words, rng)
        wrong = next(o for o in question.options if o != question.answer)

        assert question.is_correct(words[0].definition)
        assert not question.is_correct(wrong)


class TestQuizScore:
    def test_percentage(self):
        assert quiz_score(7, 10) == 70
        assert quiz_score(10, 10) == 100
        assert quiz_score(0, 3) == 0

    def test_rounds_half_up(self):
        assert quiz_score(1, 8) == 13

    def test_empty_quiz(self):
        assert quiz_score(0, 0) == 0
