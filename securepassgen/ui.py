# BaseUI, GeneratorUI
# (commands shared by command line and shell)
#

from pathlib import Path
from functools import wraps
from threading import Timer
import configparser

from prompt_toolkit import prompt as prompt_input
from prompt_toolkit.formatted_text import FormattedText
from blessed import Terminal
import pyperclip

from .errors import GenerationError
from .fileformat import save_file, FILE_FORMATS
from .history import SessionHistory
from .entropy import GUESSES_PER_SECOND
from .options import GenerationOptions, MIN_LENGTH, MAX_LENGTH
from .pwgen import PasswordGenerator
from .security import SecurityAssessor, StrengthCategory, format_crack_time

DATA_DIR = Path('~/.securepassgen')
CLIPBOARD_TIMEOUT_SECS = 30

STRENGTH_COLORS = {
    StrengthCategory.VERY_WEAK: 'bright_red',
    StrengthCategory.WEAK: 'red',
    StrengthCategory.FAIR: 'yellow',
    StrengthCategory.GOOD: 'green',
    StrengthCategory.STRONG: 'bright_green',
    StrengthCategory.VERY_STRONG: 'bright_cyan',
}

#: Option names accepted by `set` command, mapped to GenerationOptions fields
OPTION_NAMES = {
    'length': 'length',
    'lowercase': 'lowercase',
    'uppercase': 'uppercase',
    'digits': 'digits',
    'special': 'special',
    'ambiguous': 'avoid_ambiguous',
    'require': 'require_all',
    'min_digits': 'min_digits',
    'min_special': 'min_special',
}


def with_results(func):
    """Require generated passwords. Decorator for UI commands."""
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        if self._results:
            return func(self, *args, **kwargs)
        print("Nothing generated yet. See `help generate`.")
    return wrapper


def parse_bool(value: str) -> bool:
    try:
        return configparser.ConfigParser.BOOLEAN_STATES[value.lower()]
    except KeyError:
        raise ValueError(f"Not a boolean: {value!r}") from None


class BaseUI:

    #################
    # Other Utility #
    #################

    def _copy(self, text):
        """Wraps copy-to-clipboard function to allow overriding."""
        pyperclip.copy(text)

    def _paste(self):
        """Wraps paste-from-clipboard function to allow overriding."""
        return pyperclip.paste()

    def _input(self, prompt):
        """Wraps input function to allow overriding."""
        return input(prompt)

    def _input_pass(self, prompt):
        """Wraps getpass function to allow overriding."""
        return prompt_input(FormattedText([('bold', prompt)]), is_password=True)

    def _ask_yesno(self, prompt) -> bool:
        """Ask `prompt` [Y/n], return answer as bool"""
        ans = self._input(prompt + " [Y/n] ")
        return len(ans) == 0 or ans.lower()[0] == 'y'


class GeneratorUI(BaseUI):

    """UI commands operating on a password generator.

    Keeps the last generated passwords for `copy` and `save`.
    They are wiped when replaced and on :meth:`close`.

    """

    def __init__(self, options=None, random_source=None,
                 guesses_per_second=GUESSES_PER_SECOND,
                 min_length=MIN_LENGTH, max_length=MAX_LENGTH,
                 clipboard_timeout=CLIPBOARD_TIMEOUT_SECS,
                 show_entropy=True, show_strength=True, quiet=False):
        self._history = SessionHistory()
        assessor = SecurityAssessor(guesses_per_second, history=self._history)
        self._generator = PasswordGenerator(random_source, assessor,
                                            min_length=min_length, max_length=max_length)
        self._options = options or GenerationOptions()
        self._clipboard_timeout = clipboard_timeout
        self._clipboard_timer = None
        self._results = []
        self.show_entropy = show_entropy
        self.show_strength = show_strength
        self.quiet = quiet

    @property
    def options(self) -> GenerationOptions:
        return self._options

    @property
    def results(self) -> list:
        return self._results

    def close(self):
        """Wipe generated passwords, clear clipboard if it still holds one."""
        if self._clipboard_timer is not None:
            self._clipboard_timer.cancel()
            self._clipboard_timer.function(*self._clipboard_timer.args)
            self._clipboard_timer = None
        self._wipe_results()

    ###############
    # UI Commands #
    ###############

    def cmd_generate(self, count=1):
        """Generate passwords using current options"""
        try:
            count = int(count)
        except ValueError:
            return print("Invalid value for `count`:", count)
        try:
            results = self._generator.generate_bulk(self._options, count)
        except GenerationError as e:
            return print("Error:", e)
        self._set_results(results)
        return True

    def cmd_pattern(self, pattern):
        """Generate password from pattern

        Each character of the pattern selects class of one character:
        ``l`` lowercase, ``U`` uppercase, ``n`` digit, ``s`` special.

        Example: ``pattern llUnss``

        """
        try:
            result = self._generator.generate_from_pattern(pattern)
        except GenerationError as e:
            return print("Error:", e)
        self._set_results([result])
        return True

    def cmd_assess(self, text=None):
        """Assess strength of a password

        When no `text` given, asks for it without echo.

        """
        if text is None:
            text = self._input_pass("Password: ")
        if not text:
            return print("Nothing to assess.")
        self.print_assessment(self._generator.assessor.assess(text))

    def cmd_options(self):
        """Print current generator options"""
        for name, field in OPTION_NAMES.items():
            print(name.ljust(12), getattr(self._options, field), sep='')

    def cmd_set(self, option, value):
        """Change a generator option

        Options: length, lowercase, uppercase, digits, special,
        ambiguous (avoid ambiguous characters), require (all selected types),
        min_digits, min_special. Option name may be abbreviated.

        """
        candidates = [name for name in OPTION_NAMES if name.startswith(option.lower())]
        if len(candidates) != 1:
            return print("Unknown or ambiguous option:", option)
        field = OPTION_NAMES[candidates[0]]
        try:
            if isinstance(getattr(self._options, field), bool):
                value = parse_bool(value)
            else:
                value = int(value)
        except ValueError as e:
            return print(e)
        options = self._options._replace(**{field: value})
        try:
            self._generator.validate(options)
        except GenerationError as e:
            return print("Not accepted:", e)
        self._options = options

    @with_results
    def cmd_copy(self, number=1):
        """Copy generated password to clipboard

        The clipboard is cleared after a timeout, unless it was changed
        in the meantime.

        """
        result = self._select_result(number)
        if result is None:
            return
        self._copy_with_timeout(bytes(result))
        if self._clipboard_timeout > 0:
            print(f"Copied to clipboard, will be cleared in {self._clipboard_timeout} seconds.")
        else:
            print("Copied to clipboard.")

    @with_results
    def cmd_save(self, filename=None, file_format='text'):
        """Save generated passwords to a file (text, csv or json)

        The output file will contain the passwords in plain text!
        Remove it with ``securepassgen shred`` when no longer needed.

        """
        if file_format not in FILE_FORMATS:
            return print("Unknown format:", file_format)
        if filename is None:
            filename = self._input("File: ")
            if not filename:
                return
        filename = Path(filename).expanduser()
        if filename.exists() and not self._ask_yesno("File exists. Overwrite?"):
            return
        try:
            save_file(filename, self._results, file_format)
        except OSError as e:
            return print(e)
        print(f"Saved {len(self._results)} passwords to file {str(filename)!r}.")

    def cmd_clear(self):
        """Wipe generated passwords from memory"""
        self._wipe_results()

    ###########
    # Display #
    ###########

    def print_results(self):
        for n, result in enumerate(self._results, 1):
            self.print_result(result, n if len(self._results) > 1 else None)

    def print_result(self, result, number=None):
        term = Terminal()
        prefix = "[%d] " % number if number is not None else ''
        if self.quiet:
            print(result.password)
            return
        print(prefix, term.bold(result.password), sep='')
        indent = ' ' * len(prefix)
        if self.show_entropy:
            print(indent, "Entropy:  %.1f bits" % result.entropy, sep='')
        if self.show_strength:
            color = getattr(term, STRENGTH_COLORS[result.category])
            print(indent, "Strength: ", color("%s (%d/100)" % (result.strength, result.score)),
                  sep='')
        if result.assessment.is_duplicate:
            print(indent, term.bright_yellow("Warning: duplicate password"), sep='')

    def print_assessment(self, assessment):
        term = Terminal()
        color = getattr(term, STRENGTH_COLORS[assessment.category])
        print("Strength:   ", color(assessment.category.label), sep='')
        print("Score:      ", color("%d/100" % assessment.score), sep='')
        print("Entropy:    %.1f bits" % assessment.entropy)
        print("Crack time: ", term.magenta(format_crack_time(assessment.crack_time)), sep='')
        if assessment.has_weak_pattern:
            print(term.bright_red("Warning: contains weak patterns"))
        if assessment.has_dictionary_word:
            print(term.bright_red("Warning: contains dictionary words"))
        if assessment.is_duplicate:
            print(term.bright_yellow("Warning: duplicate password"))

    ###########
    # Utility #
    ###########

    def wait_clipboard(self):
        """Block until clipboard is cleared. Ctrl-C clears it immediately."""
        if self._clipboard_timer is None:
            return
        try:
            self._clipboard_timer.join()
        except KeyboardInterrupt:
            print()
        self.close()

    def _set_results(self, results):
        self._wipe_results()
        self._results = results
        for result in results:
            self._history.add(bytes(result))
        self.print_results()

    def _wipe_results(self):
        for result in self._results:
            result.wipe()
        self._results = []

    def _select_result(self, number):
        try:
            index = int(number) - 1
            if index < 0:
                raise IndexError(index)
            return self._results[index]
        except (ValueError, IndexError):
            print("Not found.")
            return None

    def _copy_with_timeout(self, data: bytes):
        if self._clipboard_timer is not None:
            self._clipboard_timer.cancel()
            self._clipboard_timer = None
        self._copy(data.decode('ascii'))
        if self._clipboard_timeout > 0:
            self._clipboard_timer = Timer(self._clipboard_timeout, self._clear_clipboard, (data,))
            self._clipboard_timer.daemon = True
            self._clipboard_timer.start()

    def _clear_clipboard(self, data: bytes):
        if self._paste() == data.decode('ascii'):
            self._copy('')
