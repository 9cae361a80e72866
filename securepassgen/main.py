import sys
import logging
import argparse
import configparser
from pathlib import Path

from . import shell, ui, backend
from .entropy import GUESSES_PER_SECOND
from .errors import GenerationError
from .fileformat import FILE_FORMATS, save_file, secure_delete
from .options import GenerationOptions, MIN_LENGTH, MAX_LENGTH

CONFIG_SECTION = 'securepassgen'
DEFAULT_CONFIG_FILE = ui.DATA_DIR / 'securepassgen.conf'

log = logging.getLogger(__name__)


class Config:

    """Defaults loaded from INI file, section [securepassgen]."""

    OPTION_KEYS = GenerationOptions._fields
    LENGTH_KEYS = ('min_length', 'max_length')
    INT_KEYS = ('count', 'clipboard_timeout')

    def __init__(self, config_file=DEFAULT_CONFIG_FILE):
        self._config_file = Path(config_file).expanduser()
        self.options = GenerationOptions()
        self.min_length = MIN_LENGTH
        self.max_length = MAX_LENGTH
        self.count = 1
        self.clipboard_timeout = ui.CLIPBOARD_TIMEOUT_SECS
        self.guesses_per_second = GUESSES_PER_SECOND
        self.file_format = 'text'
        self.load()

    def load(self):
        log.debug("Loading config %r", str(self._config_file))
        config = configparser.ConfigParser()
        config.read(self._config_file, encoding='utf-8')
        for section in config.sections():
            if section != CONFIG_SECTION:
                self._warn(f"unknown section {section!r}")
                continue
            section = config[section]
            for key in section:
                try:
                    self._load_key(section, key)
                except ValueError as e:
                    self._warn(f"invalid value for [{section.name}] {key!r}: {e}")
        if self.min_length > self.max_length:
            self._warn(f"min_length {self.min_length} exceeds max_length {self.max_length}")
            self.min_length, self.max_length = MIN_LENGTH, MAX_LENGTH

    def save(self):
        config = configparser.ConfigParser()
        values = self.options._asdict()
        values.update(min_length=self.min_length, max_length=self.max_length,
                      count=self.count, clipboard_timeout=self.clipboard_timeout,
                      guesses_per_second=self.guesses_per_second,
                      format=self.file_format)
        config[CONFIG_SECTION] = {k: str(v) for k, v in values.items()}
        self._config_file.parent.mkdir(0o700, parents=True, exist_ok=True)
        with open(self._config_file, 'w', encoding='utf-8') as f:
            config.write(f)
        print(f"Config saved to {str(self._config_file)!r}.")

    def _load_key(self, section, key):
        if key in self.OPTION_KEYS:
            if isinstance(getattr(self.options, key), bool):
                value = section.getboolean(key)
            else:
                value = section.getint(key)
            self.options = self.options._replace(**{key: value})
        elif key in self.LENGTH_KEYS:
            value = section.getint(key)
            if not 1 <= value <= MAX_LENGTH:
                raise ValueError(f"must be between 1 and {MAX_LENGTH}")
            setattr(self, key, value)
        elif key in self.INT_KEYS:
            setattr(self, key, section.getint(key))
        elif key == 'guesses_per_second':
            self.guesses_per_second = section.getfloat(key)
        elif key == 'format':
            if section[key] not in FILE_FORMATS:
                raise ValueError(section[key])
            self.file_format = section[key]
        else:
            self._warn(f"unknown key [{section.name}] {key!r}")

    def _warn(self, msg):
        print(f"WARNING: {msg} in config {str(self._config_file)!r}", file=sys.stderr)


def make_ui(cfg, ui_class=ui.GeneratorUI, **kwargs):
    return ui_class(cfg.options,
                    guesses_per_second=cfg.guesses_per_second,
                    min_length=cfg.min_length,
                    max_length=cfg.max_length,
                    clipboard_timeout=cfg.clipboard_timeout,
                    **kwargs)


def run_shell(config_file, timeout):
    cfg = Config(config_file)
    shell.SHELL_TIMEOUT_SECS = timeout
    shell_ui = make_ui(cfg, shell.ShellUI)
    shell_ui.start()


def run_gen(config_file, length, count, lowercase, uppercase, digits, special,
            avoid_ambiguous, require_all, min_digits, min_special, pattern,
            output_file, file_format, copy, entropy, strength, quiet, save_config):
    cfg = Config(config_file)
    options = cfg.options
    if any((lowercase, uppercase, digits, special)):
        options = options._replace(lowercase=lowercase, uppercase=uppercase,
                                   digits=digits, special=special)
        # Deselected class can't have minimal count
        if not digits and min_digits is None:
            options = options._replace(min_digits=0)
        if not special and min_special is None:
            options = options._replace(min_special=0)
    overrides = dict(length=length, min_digits=min_digits, min_special=min_special,
                     avoid_ambiguous=avoid_ambiguous or None, require_all=require_all)
    options = options._replace(**{k: v for k, v in overrides.items() if v is not None})
    if count is None:
        count = cfg.count
    cfg.options = options
    if save_config:
        cfg.count = count
        cfg.file_format = file_format or cfg.file_format
        cfg.save()

    gen_ui = make_ui(cfg, show_entropy=entropy, show_strength=not quiet, quiet=quiet)
    try:
        ok = gen_ui.cmd_pattern(pattern) if pattern else gen_ui.cmd_generate(count)
        if not ok:
            return 1
        if strength and not quiet:
            for result in gen_ui.results:
                print()
                gen_ui.print_assessment(result.assessment)
        if output_file:
            try:
                save_file(Path(output_file).expanduser(), gen_ui.results,
                          file_format or cfg.file_format)
            except OSError as e:
                print(e)
                return 1
            if not quiet:
                print(f"Saved to file {output_file!r}.")
        if copy:
            gen_ui.cmd_copy()
            gen_ui.wait_clipboard()
    finally:
        gen_ui.close()


def run_assess(config_file, text):
    cfg = Config(config_file)
    assess_ui = make_ui(cfg)
    assess_ui.cmd_assess(text)


def run_shred(file, passes):
    try:
        secure_delete(Path(file).expanduser(), passes)
    except (OSError, ValueError) as e:
        print(e)
        return 1
    print(f"Removed file {file!r}")


def parse_args(argv=None):
    """Process command line args."""
    ap = argparse.ArgumentParser(prog="securepassgen",
                                 description="Secure password generator",
                                 formatter_class=argparse.RawTextHelpFormatter)
    ap.add_argument('-D', '--debug', action='store_true',
                    help="print debug messages to stderr")

    # Sub-commands
    sp = ap.add_subparsers()
    ap_shell = sp.add_parser("shell", aliases=['sh'],
                             help="start interactive shell (default)")
    ap_shell.set_defaults(func=run_shell)
    ap_gen = sp.add_parser("gen", aliases=['g'], help="generate passwords")
    ap_gen.set_defaults(func=run_gen)
    ap_assess = sp.add_parser("assess", aliases=['a'], help="assess password strength")
    ap_assess.set_defaults(func=run_assess)
    ap_shred = sp.add_parser("shred", help="overwrite and remove a saved password file")
    ap_shred.set_defaults(func=run_shred)

    for subparser in (ap_shell, ap_gen, ap_assess):
        subparser.add_argument('--config', dest='config_file',
                               default=DEFAULT_CONFIG_FILE,
                               help="config file (default: %(default)s)")

    ap_shell.add_argument('--timeout', type=int, default=shell.SHELL_TIMEOUT_SECS,
                          help="quit when no command is entered for this many seconds "
                               "(default: %(default)s)")

    ap_gen.add_argument('-l', '--length', type=int,
                        help="password length (default: %d)" % GenerationOptions().length)
    ap_gen.add_argument('-c', '--count', type=int,
                        help="number of passwords to generate (1-100)")
    ap_gen.add_argument('-L', '--lowercase', action='store_true',
                        help="include lowercase letters (a-z)")
    ap_gen.add_argument('-u', '--uppercase', action='store_true',
                        help="include uppercase letters (A-Z)")
    ap_gen.add_argument('-n', '--numbers', dest='digits', action='store_true',
                        help="include digits (0-9)")
    ap_gen.add_argument('-s', '--special', action='store_true',
                        help="include special characters (!@#$%%^&*)\n"
                             "(default: configured classes, all four unless changed)")
    ap_gen.add_argument('-a', '--avoid-ambiguous', action='store_true',
                        help="avoid ambiguous characters (l, I, 1, O, 0)")
    ap_gen.add_argument('--no-require-all', dest='require_all', action='store_const',
                        const=False, default=None,
                        help="do not require every selected class to be present")
    ap_gen.add_argument('--min-digits', type=int,
                        help="minimal number of digits")
    ap_gen.add_argument('--min-special', type=int,
                        help="minimal number of special characters")
    ap_gen.add_argument('-p', '--pattern',
                        help="generate from pattern, e.g. 'llUnss'\n"
                             "(l=lowercase, U=uppercase, n=digit, s=special)")
    ap_gen.add_argument('-o', dest='output_file',
                        help="save passwords to file")
    ap_gen.add_argument('--format', dest='file_format', choices=FILE_FORMATS,
                        help="output file format (default: text)")
    ap_gen.add_argument('--copy', action='store_true',
                        help="copy the (first) password to clipboard")
    ap_gen.add_argument('--entropy', action='store_true',
                        help="show entropy information")
    ap_gen.add_argument('--strength', action='store_true',
                        help="show full strength assessment")
    ap_gen.add_argument('-q', '--quiet', action='store_true',
                        help="print only the passwords")
    ap_gen.add_argument('--save-config', action='store_true',
                        help="save current settings as default")

    ap_assess.add_argument('text', nargs='?',
                           help="password to assess (asked for when omitted)")

    ap_shred.add_argument('file', type=str,
                          help="the file to be removed")
    ap_shred.add_argument('--passes', type=int, default=3,
                          help="number of overwrite passes, max 8 (default: %(default)s)")

    args = ap.parse_args(args=argv)

    if 'func' not in args:
        ap_shell.parse_args([], namespace=args)

    return args


def main(argv=None):
    """Main program

    :param argv: Used in tests. Default is sys.argv
    :return: Exit code
    """
    args = parse_args(argv)
    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format='%(name)s: %(message)s')
    delattr(args, 'debug')
    run_func = args.func
    delattr(args, 'func')
    try:
        return run_func(**vars(args))
    except GenerationError as e:
        print("Error:", e)
        return 1
    except backend.MissingError as e:
        print(e)
        return 1
