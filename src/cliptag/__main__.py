import argparse
import logging
import subprocess
import sys
from pathlib import Path

from cliptag.config import DATA_DIR, DB_PATH, LOG_PATH
from cliptag.utils import ensure_dirs

PLIST_NAME = "com.cliptag.app.plist"
LAUNCHAGENT_DIR = Path.home() / "Library" / "LaunchAgents"
PLIST_PATH = LAUNCHAGENT_DIR / PLIST_NAME


def get_cliptag_path() -> str:
    """Get the path to the cliptag executable."""
    import shutil

    cliptag_path = shutil.which("cliptag")
    if cliptag_path:
        return cliptag_path
    return f"{sys.executable} -m cliptag"


def create_plist(cliptag_path: str) -> str:
    """Generate the LaunchAgent plist content."""
    program_args = "\n".join(f"        <string>{arg}</string>" for arg in [*cliptag_path.split(), "run"])
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" "http://www.apple.com/DTDs/PropertyList-1.0.dtd">
<plist version="1.0">
<dict>
    <key>Label</key>
    <string>com.cliptag.app</string>
    <key>ProgramArguments</key>
    <array>
{program_args}
    </array>
    <key>RunAtLoad</key>
    <true/>
    <key>KeepAlive</key>
    <true/>
    <key>StandardOutPath</key>
    <string>{DATA_DIR}/cliptag.log</string>
    <key>StandardErrorPath</key>
    <string>{DATA_DIR}/cliptag.log</string>
</dict>
</plist>
"""


def _open_settings():
    from cliptag.settings import SettingsManager
    from cliptag.storage import KeyValueStore

    kv = KeyValueStore(DB_PATH)
    return kv, SettingsManager(kv)


def _record_auto_start(enabled: bool) -> None:
    kv, settings = _open_settings()
    with kv:
        settings.auto_start = enabled


def install_launchagent() -> int:
    """Install and start the LaunchAgent."""
    ensure_dirs()

    cliptag_path = get_cliptag_path()
    print(f"Installing LaunchAgent for: {cliptag_path}")

    LAUNCHAGENT_DIR.mkdir(parents=True, exist_ok=True)

    if PLIST_PATH.exists():
        subprocess.run(
            ["launchctl", "unload", str(PLIST_PATH)],
            capture_output=True,
        )

    PLIST_PATH.write_text(create_plist(cliptag_path))
    print(f"Created: {PLIST_PATH}")

    result = subprocess.run(
        ["launchctl", "load", str(PLIST_PATH)],
        capture_output=True,
        text=True,
    )

    if result.returncode == 0:
        _record_auto_start(True)
        print("Cliptag is now running in the background.")
        print("It will start automatically on login.")
        return 0
    else:
        print(f"Failed to load LaunchAgent: {result.stderr}")
        return 1


def uninstall_launchagent() -> int:
    """Stop and remove the LaunchAgent."""
    if not PLIST_PATH.exists():
        print("LaunchAgent not installed.")
        return 0

    subprocess.run(
        ["launchctl", "unload", str(PLIST_PATH)],
        capture_output=True,
    )

    PLIST_PATH.unlink()
    _record_auto_start(False)
    print("LaunchAgent uninstalled.")
    print("Cliptag will no longer start on login.")
    return 0


def is_agent_running() -> bool:
    """Return True if launchd has the Cliptag agent loaded."""
    try:
        result = subprocess.run(
            ["launchctl", "list", "com.cliptag.app"],
            capture_output=True,
            text=True,
        )
    except OSError:
        return False
    return result.returncode == 0


def check_status() -> int:
    """Check if Cliptag is running."""
    if is_agent_running():
        print("Cliptag is running.")
        if PLIST_PATH.exists():
            print(f"LaunchAgent: {PLIST_PATH}")
        return 0
    else:
        print("Cliptag is not running.")
        if PLIST_PATH.exists():
            print(f"LaunchAgent installed but not loaded: {PLIST_PATH}")
        else:
            print("LaunchAgent not installed. Run: cliptag install")
        return 1


def show_stats() -> int:
    """Print entry counts per category."""
    from cliptag.history import HistoryStore
    from cliptag.menu import stats_summary

    ensure_dirs()
    kv, settings = _open_settings()
    with kv:
        print(stats_summary(HistoryStore(kv, settings).stats()))
    return 0


def export_history(output: str | None) -> int:
    """Write the sanitized history export to a file, or stdout."""
    from cliptag.history import HistoryStore

    ensure_dirs()
    kv, settings = _open_settings()
    with kv:
        data = HistoryStore(kv, settings).export()

    if output is None:
        print(data)
        return 0
    try:
        Path(output).write_text(data + "\n", encoding="utf-8")
    except OSError as exc:
        print(f"Failed to write {output}: {exc}")
        return 1
    print(f"Exported history to {output}")
    return 0


def _refuse_while_running(hint: str) -> bool:
    # The running app's in-memory history is authoritative.
    if is_agent_running():
        print(f"Cliptag is running; {hint}")
        return True
    return False


def clear_history() -> int:
    from cliptag.history import HistoryStore

    if _refuse_while_running("use Clear History in its menu instead."):
        return 1
    ensure_dirs()
    kv, settings = _open_settings()
    with kv:
        HistoryStore(kv, settings).clear()
    print("Clipboard history cleared.")
    return 0


def reset_app() -> int:
    """Remove all history, settings and flags."""
    if _refuse_while_running("quit it or run 'cliptag uninstall' first."):
        return 1
    ensure_dirs()
    kv, settings = _open_settings()
    with kv:
        settings.reset()
    print("Cliptag has been reset to defaults.")
    return 0


def run_app():
    """Run the Cliptag application."""
    ensure_dirs()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(LOG_PATH),
            logging.StreamHandler(sys.stderr),
        ],
    )

    from cliptag.app import CliptagApp

    app = CliptagApp()
    app.run()


def main():
    parser = argparse.ArgumentParser(
        description="Cliptag - Smart clipboard history for macOS",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  run         Run Cliptag in foreground (default)
  install     Install as LaunchAgent (runs on login)
  uninstall   Remove LaunchAgent
  status      Check if Cliptag is running
  stats       Show history counts per category
  export      Export history as JSON (passwords excluded)
  clear       Delete all clipboard history
  reset       Delete all history and settings

Examples:
  cliptag install              # Install and start as background service
  cliptag export -o out.json   # Save a sanitized copy of the history
""",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="run",
        choices=["run", "install", "uninstall", "status", "stats", "export", "clear", "reset"],
        help="Command to run",
    )
    parser.add_argument("-o", "--output", help="File to write for the export command")

    args = parser.parse_args()

    if args.command == "install":
        sys.exit(install_launchagent())
    elif args.command == "uninstall":
        sys.exit(uninstall_launchagent())
    elif args.command == "status":
        sys.exit(check_status())
    elif args.command == "stats":
        sys.exit(show_stats())
    elif args.command == "export":
        sys.exit(export_history(args.output))
    elif args.command == "clear":
        sys.exit(clear_history())
    elif args.command == "reset":
        sys.exit(reset_app())
    else:
        run_app()


if __name__ == "__main__":
    main()
