# setup_favicon.py
"""
Copy public/assets/MF.png to app/static/icon.png so the dashboard pages
pick it up as their favicon.

Run from the project root:

    python setup_favicon.py
"""
import shutil
import sys
from pathlib import Path

SOURCE = Path("public") / "assets" / "MF.png"
DESTINATION = Path("app") / "static" / "icon.png"


def main() -> int:
    root = Path.cwd()
    source = root / SOURCE
    destination = root / DESTINATION

    if not source.is_file():
        print(f"❌ Error: MF.png not found at {SOURCE.as_posix()}")
        print(f"📝 Please add your MF.png file to {SOURCE.parent.as_posix()}/ first.")
        return 1

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, destination)
    except OSError as e:
        print(f"❌ Error copying file: {e}")
        return 1

    print(f"✅ Successfully copied MF.png to {DESTINATION.as_posix()}")
    print("🔄 Please restart the server for changes to take effect.")
    print("🌐 Hard refresh your browser (Cmd+Shift+R or Ctrl+Shift+R) to see the new favicon.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
