# =============================================================================
# NetSpike - Command Line Interface
# =============================================================================
"""
Terminal front end: reads one command line per turn and prints the log.
"""

import logging
from typing import List

from .config import get_settings
from .core import GameEngine, LogEntry, EntryType, list_modifiers, play_random_game
from .core.modifiers import is_known_modifier


ENTRY_PREFIXES = {
    EntryType.ERROR: "!! ",
    EntryType.WARNING: "** ",
    EntryType.SUCCESS: "++ ",
}


def print_header():
    """Print game header"""
    print("\n" + "=" * 60)
    print("   NETSPIKE")
    print("   Crack the network. Spike the targets. Stay hidden.")
    print("=" * 60 + "\n")


def print_entries(entries: List[LogEntry]):
    for entry in entries:
        if entry.type == EntryType.INPUT:
            continue
        print(ENTRY_PREFIXES.get(entry.type, "") + entry.text)


def print_modifiers():
    print("Modifiers:")
    for mod in list_modifiers():
        print(f"  {mod.key:<7} {mod.name} - {mod.description}")


def choose_modifier() -> str:
    """Ask for a modifier keyword; blank or unknown gives the default rules"""
    default = get_settings().DEFAULT_MODIFIER
    word = input(f"\nModifier keyword (blank for {default or 'none'}, '?' to list): ").strip()
    if word == "?":
        print_modifiers()
        word = input("\nModifier keyword: ").strip()
    word = word or default
    if word and not is_known_modifier(word):
        print(f"Unknown modifier '{word}', using the default rules.")
        return ""
    return word


def interactive_game():
    """Run an interactive game session"""
    print_header()
    engine = GameEngine(choose_modifier())
    print()
    print_entries(engine.welcome_entries())

    while not engine.is_game_over():
        try:
            line = input("\n> ")
        except EOFError:
            print("\nConnection closed.")
            break
        if line.strip().lower() in ("quit", "exit"):
            print("Game ended by player.")
            break
        print_entries(engine.execute(line))

    print()
    print_entries(engine.build_game_over_entries())


def demo_game():
    """Run a quick demo with random commands"""
    print_header()
    print("Running random game demo...")

    result = play_random_game()

    print(f"\n{'='*50}")
    print("Demo Game Results:")
    print(f"{'='*50}")
    if result["won"]:
        print("Outcome: WON")
    else:
        print(f"Outcome: {result['loss_reason'] or 'UNFINISHED'}")
    print(f"Turns: {result['turns']}")
    print(f"Score: {result['score']}")
    print("\nStatistics:")
    for key, value in result["stats"].items():
        print(f"  {key}: {value}")


def main():
    """Main entry point"""
    logging.basicConfig(level=get_settings().LOG_LEVEL.upper())
    print_header()

    print("Options:")
    print("  1. Play Interactive Game")
    print("  2. Run Demo (Random Game)")
    print("  3. List Modifiers")
    print("  4. Exit")

    choice = input("\nChoice [1-4]: ").strip()

    if choice == "1":
        interactive_game()
    elif choice == "2":
        demo_game()
    elif choice == "3":
        print_modifiers()
    elif choice == "4":
        print("Goodbye!")
    else:
        print("Invalid choice")


if __name__ == "__main__":
    main()
