"""
Command dispatcher for the Explorer shell.

Reads one line at a time, splits it into a command and up to two arguments,
runs the matching FileOperator operation and prints its result as a single
colored line.
"""

from typing import Callable, Dict, Optional, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from explorer_core.logger import ActionType
from explorer_core.session import Session
from .file_ops import FileOperator, OpResult, Outcome


DIRECTORY_STYLE = "blue"
WRITABLE_STYLE = "green"
READ_ONLY_STYLE = "yellow"

SUCCESS_STYLE = "green"

OUTCOME_STYLES = {
    Outcome.INFO: "yellow",
    Outcome.NOT_EMPTY: "yellow",
    Outcome.MALFORMED_ARGUMENT: "yellow",
}
ERROR_STYLE = "red"

HELP_TEXT = """
==============================
 Available Commands (Linux-style)
==============================
ls                  - List directory contents with color + permissions
cd <dir>            - Change directory
mkdir <name>        - Create directory
rmdir <name>        - Remove directory (if empty)
del <file>          - Delete a file
chmod <file> <perm> - Change file permissions (rwx format)
perm <file>         - Show permissions
cp <src> <dest>     - Copy file to destination
mv <src> <dest>     - Move (rename) file or directory
sudo <cmd>          - Temporary permission override
help                - Show this help menu
exit                - Quit program
=============================="""


def parse_command(line: str) -> Tuple[str, str, str]:
    """
    Split an input line into (command, arg1, arg2).

    Extra tokens are dropped and missing ones come back as empty strings.
    """
    tokens = line.split()[:3]
    tokens += [""] * (3 - len(tokens))
    return tokens[0], tokens[1], tokens[2]


def permission_style(permission: str) -> str:
    """Pick the listing color for a permission string."""
    if permission.startswith("d"):
        return DIRECTORY_STYLE
    if "w" in permission:
        return WRITABLE_STYLE
    return READ_ONLY_STYLE


class CommandDispatcher:
    """Read-dispatch-print loop over a single Session."""

    def __init__(self, session: Session, console: Optional[Console] = None):
        """
        Args:
            session: Session the commands operate on
            console: Output console (a default rich Console if None)
        """
        self.session = session
        self.console = console or Console()
        self.operator = FileOperator(session)

        self.commands: Dict[str, Callable[[str, str], Optional[OpResult]]] = {
            "ls": lambda a, b: self.operator.list_entries(),
            "mkdir": lambda a, b: self.operator.make_directory(a),
            "rmdir": lambda a, b: self.operator.remove_directory(a),
            "del": lambda a, b: self.operator.delete_file(a),
            "chmod": lambda a, b: self.operator.change_mode(a, b),
            "perm": lambda a, b: self.operator.show_permission(a),
            "cp": lambda a, b: self.operator.copy_file(a, b),
            "mv": lambda a, b: self.operator.move_file(a, b),
            "sudo": lambda a, b: self._enable_sudo(),
            "help": lambda a, b: self._show_help(),
        }

    def prompt(self) -> str:
        return f"{self.session.current_user}@explorer {self.session.root.name} $ "

    def _print(self, text: str, style: Optional[str] = None) -> None:
        # Names come straight from the user; never interpret them as markup.
        self.console.print(text, style=style, markup=False, highlight=False)

    def _enable_sudo(self) -> OpResult:
        self.session.arm_sudo()
        self.session.audit(ActionType.SESSION, "Sudo mode armed for one command")
        return OpResult(Outcome.INFO, "Sudo mode active (for one command).")

    def _show_help(self) -> None:
        self._print(HELP_TEXT)

    def render(self, result: Optional[OpResult]) -> None:
        """Print an operation result."""
        if result is None:
            return

        if result.entries or (result.outcome is Outcome.INFO and not result.message):
            self._print("")
            for permission, name in result.entries:
                self._print(f"{permission}  {name}", style=permission_style(permission))
            return

        default = SUCCESS_STYLE if result.success else ERROR_STYLE
        self._print(result.message, style=OUTCOME_STYLES.get(result.outcome, default))

    def show_warnings(self) -> None:
        """Print, once, any problem the session hit outside the command itself."""
        if self.session.audit_warning:
            self._print(self.session.audit_warning, style="yellow")
            self.session.audit_warning = None

    def dispatch(self, cmd: str, arg1: str = "", arg2: str = "") -> Optional[OpResult]:
        """
        Run one command; sudo bookkeeping is left to execute().

        Returns:
            The operation's result, or None for commands that only print
        """
        handler = self.commands.get(cmd)
        if handler is None:
            return OpResult(Outcome.UNKNOWN_COMMAND, "Unknown command.")
        return handler(arg1, arg2)

    def execute(self, line: str) -> bool:
        """
        Handle one input line.

        Sudo mode is dropped after every line, whatever it held. A "sudo"
        line arms it for the next dispatched command only; blank lines do not
        consume it.

        Returns:
            False once the session should end, True otherwise
        """
        cmd, arg1, arg2 = parse_command(line)

        if cmd == "exit":
            return False

        if cmd:
            self.session.begin_command()
            self.render(self.dispatch(cmd, arg1, arg2))
            self.show_warnings()

        self.session.end_command()
        return True

    def banner(self) -> None:
        self.console.print(Panel.fit(
            "[bold blue]FILE EXPLORER[/bold blue]\n"
            "[dim]Type 'help' for commands, 'exit' to quit[/dim]",
            title="Explorer"
        ))
        self._print(f"Current Directory: {self.session.root.resolve()}\n")
        self.show_warnings()

    def run(self, read_line: Optional[Callable[[str], str]] = None) -> None:
        """
        Run the interactive loop until "exit" or end of input.

        Args:
            read_line: Called with the prompt, returns one line; raises
                EOFError at end of input (defaults to console.input)
        """
        read_line = read_line or (lambda prompt: self.console.input(Text(prompt)))

        self.banner()
        while True:
            try:
                line = read_line(self.prompt())
            except (EOFError, KeyboardInterrupt):
                self._print("")
                break

            if not self.execute(line):
                break

        self._print("Exiting. Goodbye!", style="yellow")
