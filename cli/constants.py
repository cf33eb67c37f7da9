"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["token", "ls", "info", "url", "download", "upload", "clear", "exit", "help"]

STYLE = Style.from_dict(
    {
        "prompt": "#FF6900 bold",
        "command": "#0088ff bold",
    }
)

MI_ORANGE = "\033[38;2;255;105;0m"
GREEN = "\033[32m"
RESET = "\033[0m"

LOGO = f"""{MI_ORANGE}
 ███╗   ███╗██╗ ██████╗██╗      ██████╗ ██╗   ██╗██████╗
 ████╗ ████║██║██╔════╝██║     ██╔═══██╗██║   ██║██╔══██╗
 ██╔████╔██║██║██║     ██║     ██║   ██║██║   ██║██║  ██║
 ██║╚██╔╝██║██║██║     ██║     ██║   ██║██║   ██║██║  ██║
 ██║ ╚═╝ ██║██║╚██████╗███████╗╚██████╔╝╚██████╔╝██████╔╝
 ╚═╝     ╚═╝╚═╝ ╚═════╝╚══════╝ ╚═════╝  ╚═════╝ ╚═════╝
{RESET}"""

WELCOME_TITLE = "MiCloud Drive CLI"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "micloud> "

HELP_TEXT = """Available commands:
  token <user_id> <service_token>     Save the account id and service token to use
  ls [folder_id]                      List a remote folder (default: root)
  info <file_id>                      Show remote file metadata
  url <file_id>                       Print the public download link of a file
  download <file_id> [output_path]    Download a file (default: ./<name>)
  upload <path> [parent_id]           Upload a local file (default: configured folder)
  clear                               Clear screen and redisplay welcome message
  help                                Show this help
  exit                                Exit REPL

Examples:
  token 12345678 V1:abcdef...
  ls
  ls 20130904091230000001
  upload ~/Pictures/holiday.jpg
  url 20210101123456000042
  download 20210101123456000042 downloads/holiday.jpg"""
