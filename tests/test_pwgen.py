import math
from concurrent.futures import ThreadPoolExecutor

import pytest

from securepassgen.charset import CharClass, build_alphabet, classify, AMBIGUOUS
from securepassgen.errors import (ValidationError, InvalidPatternChar,
                                  RandomUnavailable)
from securepassgen.options import GenerationOptions
from securepassgen.pwgen import PasswordGenerator, GeneratedPassword, MAX_BULK
from securepassgen.security import SecurityAssessor, StrengthCategory

from .conftest import SeededSource, FixedSource


class CountingSource(FixedSource):

    def __init__(self, fail_after=None):
        self.calls = 0
        self._fail_after = fail_after

    def next_in_range(self, lo, hi):
        self.calls += 1
        if self._fail_after is not None and self.calls > self._fail_after:
            raise RandomUnavailable("exhausted")
        return FixedSource.next_in_range(self, lo, hi)


def count_class(text, char_class):
    return sum(1 for c in text if classify(c) is char_class)


OPTION_SETS = [
    GenerationOptions(),
    GenerationOptions(length=8),
    GenerationOptions(length=128),
    GenerationOptions(length=12, avoid_ambiguous=True),
    GenerationOptions(length=10, min_digits=4, min_special=3),
    GenerationOptions(length=8, lowercase=False, uppercase=False, min_digits=4, min_special=4),
    GenerationOptions(length=20, uppercase=False, special=False, min_special=0),
    GenerationOptions(length=9, require_all=False, min_digits=0, min_special=0),
    GenerationOptions(length=8, digits=False, special=False, min_digits=0, min_special=0),
]


@pytest.mark.parametrize('options', OPTION_SETS)
def test_generate_properties(generator, options):
    alphabet = build_alphabet(options.lowercase, options.uppercase, options.digits,
                              options.special, options.avoid_ambiguous)
    for _ in range(100):
        with generator.generate(options) as result:
            pw = result.password
            assert len(pw) == options.length == result.length
            assert all(c in alphabet for c in pw)
            for char_class, minimum in options.required_counts().items():
                assert count_class(pw, char_class) >= minimum
            if options.avoid_ambiguous:
                assert not any(c in AMBIGUOUS for c in pw)
            assert result.entropy == pytest.approx(options.length * math.log2(len(alphabet)))
            assert 0 <= result.score <= 100
            assert result.category == StrengthCategory.from_score(result.score)


def test_minimal_length_with_all_types(seeded_source):
    generator = PasswordGenerator(seeded_source, min_length=1)
    options = GenerationOptions(length=4)
    for _ in range(100):
        pw = generator.generate(options).password
        assert sorted(classify(c).value for c in pw) == sorted('lUns')
    with pytest.raises(ValidationError) as exc_info:
        generator.generate(options._replace(length=3))
    assert exc_info.value.reason == "Length 3 is less than number of selected types (4)"


def test_length_bounds(seeded_source):
    for min_length, max_length in ((0, 128), (8, 129), (8, 100000), (20, 10)):
        with pytest.raises(ValueError):
            PasswordGenerator(seeded_source, min_length=min_length, max_length=max_length)
    generator = PasswordGenerator(seeded_source, min_length=1, max_length=20)
    assert len(generator.generate(GenerationOptions(length=20)).password) == 20
    with pytest.raises(ValidationError):
        generator.generate(GenerationOptions(length=21))


def test_patching(fixed_generator):
    # all draws give the first character of an alphabet
    assert fixed_generator.generate(GenerationOptions(length=8)).password == "A0!aaaaa"
    assert fixed_generator.generate(GenerationOptions(length=8, min_digits=3)).password \
        == "A0!00aaa"
    assert fixed_generator.generate(GenerationOptions(length=8, avoid_ambiguous=True)).password \
        == "A2!aaaaa"
    options = GenerationOptions(length=6, lowercase=False, uppercase=False,
                                min_digits=3, min_special=3)
    assert fixed_generator.generate(options).password == "!!!000"
    options = GenerationOptions(length=5, require_all=False, min_digits=0, min_special=0)
    assert fixed_generator.generate(options).password == "aaaaa"


def test_patching_keeps_earlier_requirements(fixed_generator):
    # all digits are drawn, specials then overwrite them from the left
    options = GenerationOptions(length=4, lowercase=False, uppercase=False, digits=True,
                                special=True, min_digits=1, min_special=3)
    pw = fixed_generator.generate(options).password
    assert count_class(pw, CharClass.DIGIT) == 1
    assert count_class(pw, CharClass.SPECIAL) == 3


def test_generate_from_pattern(generator, fixed_generator):
    for _ in range(50):
        pw = generator.generate_from_pattern("llUnss").password
        assert [classify(c).value for c in pw] == list("llUnss")
    result = fixed_generator.generate_from_pattern("llUnss")
    assert result.password == "aaA0!!"
    assert result.entropy == pytest.approx(6 * math.log2(70))
    result = fixed_generator.generate_from_pattern("nnnn")
    assert result.password == "0000"
    assert result.entropy == pytest.approx(4 * math.log2(10))


def test_invalid_pattern():
    source = CountingSource()
    generator = PasswordGenerator(source)
    with pytest.raises(InvalidPatternChar) as exc_info:
        generator.generate_from_pattern("llXn")
    assert exc_info.value.code == 'X'
    assert exc_info.value.position == 2
    assert source.calls == 0, "nothing drawn"
    with pytest.raises(ValidationError):
        generator.generate_from_pattern("")


def test_generate_bulk(generator):
    results = generator.generate_bulk(GenerationOptions(), 5)
    assert len(results) == 5
    assert all(isinstance(r, GeneratedPassword) for r in results)
    assert len({r.password for r in results}) == 5
    assert len(generator.generate_bulk(GenerationOptions(), MAX_BULK)) == MAX_BULK
    for count in (0, -1, MAX_BULK + 1):
        with pytest.raises(ValidationError):
            generator.generate_bulk(GenerationOptions(), count)


def test_generate_bulk_failure():
    created = []

    class RecordingGenerator(PasswordGenerator):
        def _result(self, chars, entropy):
            result = PasswordGenerator._result(self, chars, entropy)
            created.append(result)
            return result

    # enough draws for two passwords of length 8 (with up to 3 patches each)
    generator = RecordingGenerator(CountingSource(fail_after=25))
    with pytest.raises(RandomUnavailable):
        generator.generate_bulk(GenerationOptions(length=8), 10)
    assert len(created) == 2
    assert all(r.wiped for r in created)
    assert all(bytes(r) == bytes(8) for r in created)


def test_wipe(generator):
    result = generator.generate(GenerationOptions())
    assert "password" not in repr(result)
    assert result.password not in repr(result)
    result.wipe()
    assert result.wiped
    assert bytes(result) == bytes(16)
    with pytest.raises(ValueError):
        _ = result.password
    with generator.generate(GenerationOptions()) as result:
        assert not result.wiped
    assert result.wiped


def test_assessment_consistency(generator):
    assessor = SecurityAssessor()
    for _ in range(20):
        result = generator.generate(GenerationOptions(length=12))
        assessment = assessor.assess(result.password, entropy=result.entropy)
        assert result.assessment == assessment
        assert result.strength == assessment.category.label


def test_default_random_source():
    generator = PasswordGenerator()
    pw = generator.generate(GenerationOptions()).password
    assert len(pw) == 16


def test_threads():
    generator = PasswordGenerator()
    options = GenerationOptions(length=24)
    with ThreadPoolExecutor(max_workers=4) as executor:
        results = list(executor.map(lambda _: generator.generate(options), range(40)))
    assert len(results) == 40
    for result in results:
        assert len(result.password) == 24
        assert count_class(result.password, CharClass.DIGIT) >= 1


def test_reproducible():
    options = GenerationOptions(length=20)
    a = PasswordGenerator(SeededSource(7)).generate(options).password
    b = PasswordGenerator(SeededSource(7)).generate(options).password
    assert a == b
