import math
from fractions import Fraction
import pytest
from schoolsafe.errors import NotFound, ValidationError
from schoolsafe.models.quiz import QuizSubmission
from schoolsafe.quizzes import engine
from conftest import ctx_for, at

def answers(*selected):
    return [{"selectedAnswer": s} for s in selected]

def test_score_answers_three_of_four():
    questions = [{"correctAnswer": c} for c in (0, 1, 2, 3)]
    results, score = engine.score_answers(questions, answers(0, 1, 2, 0))
    assert score == 75
    assert [r["isCorrect"] for r in results] == [True, True, True, False]
    assert results[3] == {"questionIndex": 3, "selectedAnswer": 0, "isCorrect": False}

def test_missing_answers_count_as_wrong():
    questions = [{"correctAnswer": 1}] * 3
    results, score = engine.score_answers(questions, answers(1))
    assert score == 33
    assert len(results) == 3
    assert results[1]["selectedAnswer"] is None
    assert not results[2]["isCorrect"]

def test_extra_answers_are_ignored():
    questions = [{"correctAnswer": 2}, {"correctAnswer": 0}]
    results, score = engine.score_answers(questions, answers(2, 0, 3, 3))
    assert score == 100
    assert len(results) == 2

def test_score_rounds_half_up():
    questions = [{"correctAnswer": 0}] * 8
    # 5 of 8 is 62.5
    _, score = engine.score_answers(questions, answers(0, 0, 0, 0, 0, 1, 1, 1))
    assert score == 63

def test_null_selection_is_wrong():
    _, score = engine.score_answers([{"correctAnswer": 0}], answers(None))
    assert score == 0

def test_submit_quiz_persists_and_derives_pass(db, make, school):
    quiz = make.quiz(school["tenant"], school["teacher"], passing_score=70)
    ctx = ctx_for(school["student"])

    submission = engine.submit_quiz(db, ctx, quiz.id, answers(0, 1, 2, 0), time_taken=42)

    assert submission.score == 75
    assert submission.student_id == school["student"].id
    assert submission.time_taken == 42
    out = engine.submission_to_dict(submission, quiz)
    assert out["passed"] is True
    assert db.query(QuizSubmission).count() == 1

def test_below_passing_score_fails(db, make, school):
    quiz = make.quiz(school["tenant"], school["teacher"], passing_score=80)
    submission = engine.submit_quiz(db, ctx_for(school["student"]), quiz.id, answers(0, 1, 2, 0))
    assert engine.submission_to_dict(submission, quiz)["passed"] is False

def test_submit_quiz_from_other_tenant_is_not_found(db, make, school):
    elsewhere = make.tenant()
    outsider = make.user(elsewhere, "student")
    quiz = make.quiz(school["tenant"], school["teacher"])
    with pytest.raises(NotFound):
        engine.submit_quiz(db, ctx_for(outsider), quiz.id, answers(0))
    assert db.query(QuizSubmission).count() == 0

def test_submit_quiz_requires_a_list(db, make, school):
    quiz = make.quiz(school["tenant"], school["teacher"])
    with pytest.raises(ValidationError):
        engine.submit_quiz(db, ctx_for(school["student"]), quiz.id, {"selectedAnswer": 0})

def test_leaderboard_best_score_and_tie_break(db, make, school):
    tenant = school["tenant"]
    quiz = make.quiz(tenant, school["teacher"])
    ada, ben = school["student"], school["other_student"]
    cy = make.user(tenant, "student", first_name="Cy")

    engine.submit_quiz(db, ctx_for(ada), quiz.id, answers(0, 0, 0, 0), completed_at=at(1))   # 25
    engine.submit_quiz(db, ctx_for(ada), quiz.id, answers(0, 1, 2, 0), completed_at=at(5))   # 75
    engine.submit_quiz(db, ctx_for(ben), quiz.id, answers(0, 1, 2, 0), completed_at=at(3))   # 75
    engine.submit_quiz(db, ctx_for(cy), quiz.id, answers(0, 1, 2, 3), completed_at=at(9))    # 100

    board = engine.get_leaderboard(db, ctx_for(school["teacher"]), quiz.id)

    assert [row["student_id"] for row in board] == [cy.id, ben.id, ada.id]
    assert [row["best_score"] for row in board] == [100, 75, 75]
    ada_row = board[2]
    assert ada_row["attempts"] == 2
    assert ada_row["last_attempt"] == at(5)
    assert ada_row["first_name"] == "Ada"

def test_leaderboard_of_unknown_quiz(db, school):
    with pytest.raises(NotFound):
        engine.get_leaderboard(db, ctx_for(school["teacher"]), 999)

def test_students_only_see_their_own_submissions(db, make, school):
    quiz = make.quiz(school["tenant"], school["teacher"])
    engine.submit_quiz(db, ctx_for(school["student"]), quiz.id, answers(0))
    engine.submit_quiz(db, ctx_for(school["other_student"]), quiz.id, answers(1))

    mine = engine.list_submissions(db, ctx_for(school["student"]), quiz.id)
    everyone = engine.list_submissions(db, ctx_for(school["teacher"]), quiz.id)

    assert [s["student_id"] for s in mine] == [school["student"].id]
    assert len(everyone) == 2

def test_delete_quiz_removes_submissions(db, make, school):
    quiz = make.quiz(school["tenant"], school["teacher"])
    engine.submit_quiz(db, ctx_for(school["student"]), quiz.id, answers(0))

    engine.delete_quiz(db, ctx_for(school["teacher"]), quiz.id)

    assert db.query(QuizSubmission).count() == 0
    with pytest.raises(NotFound):
        engine.get_quiz(db, ctx_for(school["teacher"]), quiz.id)

def test_exact_half_rounds_up_on_long_quiz():
    questions = [{"correctAnswer": 0}] * 40
    _, score = engine.score_answers(questions, answers(*([0] * 23)))
    # 23/40 is exactly 57.5
    assert score == 58

def test_score_is_an_integer_percentage_for_every_count():
    for total in range(1, 61):
        questions = [{"correctAnswer": 0}] * total
        for correct in range(total + 1):
            _, score = engine.score_answers(questions, answers(*([0] * correct)))
            expected = math.floor(Fraction(100 * correct, total) + Fraction(1, 2))
            assert isinstance(score, int)
            assert 0 <= score <= 100
            assert score == expected, (correct, total)
