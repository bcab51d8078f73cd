# flairc/ui/__init__.py
from rich.console import Console
from rich.theme import Theme

FLAIR_THEME = Theme(
    {
        "primary": "bold #7aa2f7",
        "success": "#9ece6a",
        "warning": "bold #e0af68",
        "error": "bold #f7768e",
        "info": "dim #7dcfff",
        "token": "#bb9af7",
    }
)

# results go to stdout, everything addressed to the human goes to stderr
console = Console(theme=FLAIR_THEME)
err_console = Console(theme=FLAIR_THEME, stderr=True)
