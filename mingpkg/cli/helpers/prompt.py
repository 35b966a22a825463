"""Interactive confirmation prompts."""

from .. import colors, display

# kind → (heading, question, color)
_QUESTIONS = {
    "conflicts": (
        "The following installed packages conflict with this installation:",
        "Continue anyway?",
        colors.warning,
    ),
    "install": (
        "The following {count} package(s) will be installed:",
        "Proceed with installation?",
        colors.pkg_install,
    ),
    "uninstall": (
        "The following package will be removed:",
        "Proceed with removal?",
        colors.pkg_remove,
    ),
}


def ask_yes_no(question: str) -> bool:
    """Ask a [y/N] question on stdin. Anything but yes means no."""
    try:
        response = input(f"{question} [y/N] ")
    except (KeyboardInterrupt, EOFError):
        print()
        return False
    return response.strip().lower() in ('y', 'yes')


def make_confirm(assume_yes: bool = False):
    """Build the confirmation callback used by install/uninstall operations.

    Args:
        assume_yes: Answer yes to every question (--yes)
    """
    def confirm(kind: str, names: list) -> bool:
        heading, question, color = _QUESTIONS[kind]
        print(f"\n{colors.bold(heading.format(count=len(names)))}")
        display.print_package_list(names, indent=4, color_func=color)

        if assume_yes:
            return True
        if ask_yes_no(f"\n{question}"):
            return True
        print(colors.dim("Aborted."))
        return False

    return confirm
