import math

import pytest

from securepassgen.history import SessionHistory
from securepassgen.security import (SecurityAssessor, SecurityAssessment, StrengthCategory,
                                    strength_score, has_weak_pattern, has_dictionary_word,
                                    leet_normalize, format_crack_time)

STRONG_PASSWORD = "Gx7#Mq2$Vz9&Kp4*Rw8!Tb6^Hy3@Nc5%"


def test_category():
    assert StrengthCategory.from_score(0) is StrengthCategory.VERY_WEAK
    assert StrengthCategory.from_score(19) is StrengthCategory.VERY_WEAK
    assert StrengthCategory.from_score(20) is StrengthCategory.WEAK
    assert StrengthCategory.from_score(59) is StrengthCategory.FAIR
    assert StrengthCategory.from_score(99) is StrengthCategory.STRONG
    assert StrengthCategory.from_score(100) is StrengthCategory.VERY_STRONG
    assert [c.label for c in StrengthCategory] == \
        ["Very Weak", "Weak", "Fair", "Good", "Strong", "Very Strong"]


def test_strength_score():
    assert strength_score('') == 0
    # length 4: 10, variety 40, digit inside 10
    assert strength_score('aB3!') == 60
    # length 8: 20, variety 40, inside 10, lower+upper+digit 10
    assert strength_score('Gx7#Mq2$') == 80
    assert strength_score('abcdefgh') == 20 + 10
    # non-letter only at the ends doesn't count
    assert strength_score('1abcdefghij') == 30 + 20
    assert strength_score(STRONG_PASSWORD) == 100


@pytest.mark.parametrize('text', [
    'abc', 'xyz', 'CbA', '987', '456', 'aaa', '!!!', 'poi', 'ghj', '890',
    'mypassword', 'Qwerty', 'x_admin_x',
])
def test_weak_pattern(text):
    assert has_weak_pattern(text)


@pytest.mark.parametrize('text', ['', 'ab', 'Gx7#Mq2$', 'QWE', 'a1b2c3', STRONG_PASSWORD])
def test_no_weak_pattern(text):
    assert not has_weak_pattern(text)


def test_leet():
    assert leet_normalize('p@$$w0rd') == 'password'
    assert leet_normalize('5h4d0w') == 'shadow'
    assert leet_normalize('Gx') == 'Gx'


@pytest.mark.parametrize('text', ['password', 'MyPassWord', 'P4ssw0rd', 'xx$unsh1nexx', 'love'])
def test_dictionary_word(text):
    assert has_dictionary_word(text)


@pytest.mark.parametrize('text', ['', 'Gx7#Mq2$', STRONG_PASSWORD])
def test_no_dictionary_word(text):
    assert not has_dictionary_word(text)


def test_assess_weak():
    assessment = SecurityAssessor().assess("password123")
    # 60, weak pattern: 60 * 0.7 = 42, dictionary: 42 * 0.6 = 25
    assert assessment.score == 25
    assert assessment.category is StrengthCategory.WEAK
    assert assessment.has_weak_pattern
    assert assessment.has_dictionary_word
    assert not assessment.is_duplicate
    assert assessment.entropy == pytest.approx(11 * math.log2(36))


def test_assess_strong():
    assessment = SecurityAssessor().assess(STRONG_PASSWORD)
    assert assessment.score == 100
    assert assessment.category is StrengthCategory.VERY_STRONG
    assert not assessment.has_weak_pattern
    assert not assessment.has_dictionary_word


def test_assess_empty():
    assert SecurityAssessor().assess('') == SecurityAssessment()
    assert SecurityAssessor().assess('').score == 0


def test_assess_with_entropy():
    assessor = SecurityAssessor(guesses_per_second=1e6)
    assessment = assessor.assess('Gx7#Mq2$', entropy=42.0)
    assert assessment.entropy == 42.0
    assert assessment.crack_time == pytest.approx(2 ** 42 / 1e6)


def test_assess_duplicate():
    history = SessionHistory()
    assessor = SecurityAssessor(history=history)
    assert not assessor.assess('Gx7#Mq2$').is_duplicate
    history.add('Gx7#Mq2$')
    assert assessor.assess('Gx7#Mq2$').is_duplicate
    assert not assessor.assess('Gx7#Mq2%').is_duplicate


def test_format_crack_time():
    assert format_crack_time(0) == "0.0 seconds"
    assert format_crack_time(30) == "30.0 seconds"
    assert format_crack_time(90) == "1.5 minutes"
    assert format_crack_time(7200) == "2.0 hours"
    assert format_crack_time(3 * 86400) == "3.0 days"
    assert format_crack_time(2 * 31536000) == "2.0 years"
    assert format_crack_time(math.inf) == "inf years"
