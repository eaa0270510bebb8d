"""User interaction utilities for mongosetup."""


def confirm(message: str, default: bool = False) -> bool:
    """
    Ask the user for confirmation.

    Args:
        message: The question to ask
        default: Default answer if user presses Enter or stdin is closed

    Returns:
        True if user confirmed, False otherwise
    """
    if default:
        prompt_suffix = "[Y/n]"
    else:
        prompt_suffix = "[y/N]"

    while True:
        try:
            response = input(f"{message} {prompt_suffix}: ").strip().lower()
        except EOFError:
            print()
            return default

        if not response:
            return default
        if response in ("y", "yes"):
            return True
        if response in ("n", "no"):
            return False
        print("  Please answer 'y' or 'n'")
