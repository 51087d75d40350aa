from ai_recruiter.pipeline.scoring import extract_score, format_score


def test_explicit_score_pattern():
    assert extract_score("Score: 87, good fit") == 87


def test_explicit_score_is_case_insensitive():
    assert extract_score("overall SCORE:91") == 91


def test_explicit_score_is_not_clamped():
    assert extract_score("Score: 150") == 150


def test_bare_number_with_score_question():
    assert extract_score("72", "What is the candidate score?") == 72
    assert extract_score(" 72% ", "ATS Score") == 72


def test_bare_number_with_unrelated_question():
    assert extract_score("72", "How many years of experience?") is None
    assert extract_score("72") is None


def test_bare_number_out_of_range():
    assert extract_score("101", "What is the score?") is None


def test_numbers_inside_text_are_ignored():
    assert extract_score("Worked 5 years at 3 companies", "What is the score?") is None


def test_object_answers_are_searched_as_text():
    assert extract_score({"summary": "Score: 64"}) == 64
    assert extract_score(None, "score?") is None


def test_missing_score_renders_as_na():
    assert format_score(None) == "N/A"
    assert format_score(0) == "0"
