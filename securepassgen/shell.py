# ShellUI
# (interactive generator shell)
#

import sys
import signal
import textwrap
from inspect import signature

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.completion import WordCompleter, NestedCompleter, PathCompleter

from .backend import timeout
from .ui import GeneratorUI, OPTION_NAMES

SHELL_TIMEOUT_SECS = 600  # 10 minutes


class BaseInput:

    """Prompt with history, optional completer and placeholder."""

    completer = None

    def __init__(self, placeholder=None):
        if placeholder:
            placeholder = FormattedText([('bold ansiblack', placeholder)])
        self._session = PromptSession(complete_while_typing=True,
                                      placeholder=placeholder)

    def input(self, prompt):
        return self._session.prompt(FormattedText([('bold', prompt)]),
                                    completer=self.completer)

    def cancel(self, exception=TimeoutError):
        """Abort running prompt, `input` raises `exception`."""
        self._session.app.exit(exception=exception, style='class:exiting')


class NestedOptions(dict):

    """Dict for NestedCompleter, which also accepts unique prefixes of keys.

    E.g. with keys "length" and "lowercase", `get("len")` returns
    the value for "length", while `get("l")` returns the default.

    """

    def __init__(self, options):
        dict.__init__(self, dict.fromkeys(options))

    def get(self, key, default=None):
        matches = [k for k in self if k.startswith(key.lower())]
        return self[matches[0]] if len(matches) == 1 else default


class ShellInput(BaseInput):

    def __init__(self, commands):
        BaseInput.__init__(self)
        completions = NestedOptions(commands)
        completions['set'] = NestedCompleter(NestedOptions(OPTION_NAMES))
        completions['help'] = WordCompleter(commands)
        self.completer = NestedCompleter(completions)


class FileInput(BaseInput):

    def __init__(self):
        BaseInput.__init__(self, placeholder='passwords.txt')
        self.completer = PathCompleter(expanduser=True)


class ShellUI(GeneratorUI):

    """Read commands from user, run matching `cmd_*` methods.

    Commands may be abbreviated to any unique prefix.
    Arguments are split on whitespace, the last one takes the rest of line.

    Generated passwords are wiped on quit, timeout or SIGHUP.

    """

    def __init__(self, *args, **kwargs):
        GeneratorUI.__init__(self, *args, **kwargs)
        self._commands = {
            name[4:]: getattr(self, name)
            for name in dir(self) if name.startswith('cmd_')
        }
        self._quit = False
        if sys.platform != "win32":
            signal.signal(signal.SIGHUP, lambda _signum, _frame: self.close())

    def start(self):
        """Run the shell until quit. Always wipes passwords on exit."""
        try:
            self.mainloop()
        except (KeyboardInterrupt, EOFError):
            pass
        except TimeoutError:
            print("Timeout after %s seconds." % SHELL_TIMEOUT_SECS)
        finally:
            self.close()

    def mainloop(self):
        session = ShellInput(sorted(self._commands))
        while not self._quit:
            with timeout(SHELL_TIMEOUT_SECS, session.cancel):
                cmdline = session.input("> ")
            self.execute(cmdline)

    def execute(self, cmdline):
        """Parse and run single command line."""
        if not cmdline.strip():
            return
        name, *rest = cmdline.split(None, 1)
        command = self._find_command(name)
        if command is None:
            print("Unknown command. Try 'help'.")
            return
        nparams = len(signature(command).parameters)
        args = rest[0].split(None, nparams - 1) if rest and nparams > 1 else rest
        try:
            command(*args)
        except KeyboardInterrupt:
            print("^C")
        except TypeError as e:
            print(e)

    def cmd_quit(self):
        """Wipe passwords and quit"""
        self._quit = True

    def cmd_help(self, command=None):
        """Print list of all commands or full help for a command"""
        names = self._matching_commands(command or '')
        if not names:
            print("Not found.")
        elif command and len(names) == 1:
            self._print_help(names[0], full=True)
        else:
            for name in names:
                self._print_help(name)

    def _matching_commands(self, prefix):
        return sorted(name for name in self._commands if name.startswith(prefix))

    def _find_command(self, name):
        if name in self._commands:
            return self._commands[name]
        names = self._matching_commands(name)
        if len(names) == 1:
            return self._commands[names[0]]
        return None

    def _input(self, prompt):
        """File names are completed, other prompts are plain."""
        session = FileInput() if prompt.startswith('File:') else BaseInput()
        return session.input(prompt)

    def _print_help(self, name, full=False):
        """Print summary line from the command's docstring, or all of it."""
        command = self._commands[name]
        usage = ' '.join(p.name if p.default is p.empty else f'[{p.name}]'
                         for p in signature(command).parameters.values())
        summary, _, details = (command.__doc__ or '').partition('\n')
        print(name.ljust(10), usage.ljust(24), summary.strip())
        details = textwrap.dedent(details).strip()
        if full and details:
            print('\n', details, sep='')
