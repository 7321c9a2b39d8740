"""Handlers package - Telegram bot feature plugins."""


def format_error_message(emoji: str, problem: str, action: str) -> str:
    """
    Format error messages following the pattern: [emoji] [problem] [action].

    Args:
        emoji: Visual indicator (e.g., "❌", "⚠️", "🔒")
        problem: Clear description of what went wrong
        action: Suggested next step for the user

    Returns:
        Formatted error message string

    Example:
        >>> format_error_message("❌", "Deal not found", "Browse other deals with /explore")
        "❌ Deal not found\n\nBrowse other deals with /explore"
    """
    return f"{emoji} {problem}\n\n{action}"


ERROR_TEMPLATES = {
    "not_registered": lambda: format_error_message(
        "❌",
        "You need to register first.",
        "Use /start to begin."
    ),
    "sign_in_required": lambda: format_error_message(
        "🔒",
        "Sign in required to save favorites.",
        "Use /start to register, then tap ❤️ again."
    ),
    "favorite_failed": lambda: format_error_message(
        "⚠️",
        "Failed to update favorites.",
        "Please try again in a moment."
    ),
    "no_deals": lambda: format_error_message(
        "😔",
        "No deals match right now.",
        "Try clearing filters or check back later."
    ),
    "invalid_input": lambda field, requirement: format_error_message(
        "❌",
        f"Invalid {field}.",
        f"{requirement}. Please try again."
    ),
}
