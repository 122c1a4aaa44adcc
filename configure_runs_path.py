#!/usr/bin/env python3
"""
Simple configuration tool for the Slay the Spire runs directory.
"""
import sys
from pathlib import Path

try:
    from sts_stats.config.settings import config_manager
    from sts_stats.core.data_manager import DataManager
    from sts_stats.core.errors import RunsPathError
    from sts_stats.models.character import Character
except ImportError as e:
    print(f"❌ Error importing config system: {e}")
    print("Make sure the package is installed: pip install -e .")
    sys.exit(1)


def show_current_config(manager: DataManager):
    """Display current configuration."""
    info = manager.get_runs_path_info()
    custom = manager.resolver.get_custom_path()

    print("📋 Current Runs Configuration:")
    print(f"  Custom path: {custom or 'Not set'}")
    if custom is not None and not custom.exists():
        print("  ⚠️  Custom path no longer exists, falling back to auto-detection")
    print(f"  Auto-detect: {config_manager.config.runs.auto_detect}")
    print(f"  Active path: {info.current_path or 'None'}")

    print("\n🔍 Searched locations:")
    for i, path in enumerate(manager.resolver.candidates, 1):
        exists = "✅" if path.exists() else "❌"
        print(f"  {i}. {exists} {path}")


def set_runs_path(manager: DataManager):
    """Set a custom runs directory."""
    print("\n📁 Set Runs Directory")
    print("-" * 40)

    new_path = input("Enter runs directory (or press Enter to skip): ").strip()
    if not new_path:
        print("No change made")
        return

    try:
        info = manager.set_runs_path(new_path, persist=True)
    except RunsPathError as e:
        print(f"❌ {e}")
        return

    print(f"✅ Runs directory updated: {info.current_path}")


def auto_detect_path(manager: DataManager):
    """Forget the custom path and use auto-detection."""
    print("\n🔍 Auto-detecting runs directory...")

    detected = manager.resolver.auto_detect()
    if detected is None:
        print("❌ No runs directory found in common locations")
        return

    manager.clear_runs_path(persist=True)
    print(f"✅ Using auto-detected runs directory: {detected}")


def test_configuration(manager: DataManager):
    """Count the runs that would be loaded."""
    print("\n🧪 Testing Configuration...")

    runs_path = manager.resolver.resolve()
    if runs_path is None:
        print("❌ No runs directory available")
        return

    counts = manager.count_runs_by_character()
    print(f"✅ Runs directory: {runs_path}")
    for character in Character.all():
        char_dir = Path(runs_path) / character.dir_name
        marker = "✅" if char_dir.is_dir() else "⚠️ "
        print(f"  {marker} {character.display_name:<8} {counts.get(character.dir_name, 0)} runs")

    if not any(counts.values()):
        print("⚠️  No readable .run files found")


def main():
    """Main configuration interface."""
    print("⚙️  Spire Stats Configuration")
    print("=" * 40)

    manager = DataManager()

    while True:
        show_current_config(manager)

        print("\nOptions:")
        print("1. Set runs directory manually")
        print("2. Use auto-detected runs directory")
        print("3. Test current configuration")
        print("4. Exit")

        choice = input("\nEnter choice [1-4]: ").strip()

        if choice == '1':
            set_runs_path(manager)
        elif choice == '2':
            auto_detect_path(manager)
        elif choice == '3':
            test_configuration(manager)
        elif choice == '4':
            break
        else:
            print("Invalid choice")

        print()


if __name__ == "__main__":
    main()
