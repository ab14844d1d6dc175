"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_WARNING = 2

COMMANDS = [
    "auth", "create", "deauth", "passwd", "whoami",
    "ls", "cat", "cp", "mv", "rm", "status",
    "partner", "eval", "admin",
    "clear", "exit", "help",
]

STYLE = Style.from_dict(
    {
        "prompt": "#4E2A84 bold",
        "command": "#0088ff bold",
    }
)

WELCOME_TITLE = "gsc - GSC homework submission client"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "gsc> "

HELP_TEXT = """Available commands:
  auth USER                           Log in (prompts for your password)
  create USER                         Create a new account
  deauth                              Forget stored credentials
  passwd                              Change your password
  whoami                              Print the logged-in username
  ls SPEC...                          List files, e.g. 'ls hw3' or 'ls hw3:*.c'
  cat [-a] [-n] SPEC...               Print remote files (-n numbers source lines)
  cp [-a] [-f|-i|-n] SRC... DST       Copy files to or from the server
  mv [-f|-i|-n] SRC DST               Rename or move a remote file
  rm [-a] SPEC...                     Remove remote files
  status [HW]                         User status, or status of one submission
  partner request|accept|cancel HW USER
                                      Manage partner requests
  eval get HW NUMBER                  Show a self-evaluation item
  eval set HW NUMBER SCORE [EXPL]     Answer a self-evaluation item
  admin csv | add_user [--grader|--admin] USER | del_user USER
        | divorce HW USER | extend [-e] HW USER DATESPEC
        | partners HW USER | set_exam EXAM USER POINTS POSSIBLE
        | submissions HW              Administrative commands
  clear                               Clear screen and redisplay welcome message
  help                                Show this help
  exit                                Exit REPL

Global options: -u USER (act on behalf of USER), -v (more output),
-q (less output), -j (raw JSON), -H (human-readable output).

Remote files are written hwN:NAME; NAME may be a glob ('hw3:*.c').
A leading ':' forces a local path (':hw3' is the local file 'hw3').
With -a, a bare 'hw3' means every file of homework 3.
Overwrite policy: -f always, -i ask, -n never (default from config).

Examples:
  auth alice
  cp main.c hw3:
  cp hw3:*.c src/
  cp -a hw3 hw3-copy/
  mv hw3:main.c hw4:
  admin extend hw3 alice '2024-03-01 23:59:00 -0600'"""
