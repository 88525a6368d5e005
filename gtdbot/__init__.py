"""GTD Bot - Getting Things Done over chat commands

Components:
    tasks/: Task store and the inbox-processing lifecycle engine
    activity/: Append-only per-user activity log
    channels/: Command dispatch with per-user serialization
    automation/: Weekly review reminder hook

Usage:
    from gtdbot.channels.dispatcher import build_dispatcher

    dispatcher = build_dispatcher()
    result = dispatcher.handle("alice", "add", ["Buy", "milk"])
    print(result["message"])
"""

from pathlib import Path

__version__ = "0.1.0"

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent
ARGS_DIR = PROJECT_ROOT / "args"
CONFIG_PATH = ARGS_DIR / "gtd.yaml"

# Actor used for events not tied to a user
SYSTEM_ACTOR = "SYSTEM"

__all__ = [
    "__version__",
    "PROJECT_ROOT",
    "ARGS_DIR",
    "CONFIG_PATH",
    "SYSTEM_ACTOR",
]
