"""Human-readable formatting of sizes, durations and fractions."""

# Usage color thresholds (fractions)
THRESHOLD_CRITICAL = 0.9
THRESHOLD_HIGH = 0.75
THRESHOLD_MEDIUM = 0.5


def format_bytes(size_bytes: int | float) -> str:
    """Format bytes as human-readable string.

    Args:
        size_bytes: Size in bytes

    Returns:
        Human-readable size string (e.g., "1.50G", "256M", "12.0K")
    """
    if size_bytes < 0:
        return "0"

    units = [("T", 1024**4), ("G", 1024**3), ("M", 1024**2), ("K", 1024)]

    for suffix, threshold in units:
        if size_bytes >= threshold:
            value = size_bytes / threshold
            if value >= 100:
                return f"{int(value)}{suffix}"
            if value >= 10:
                return f"{value:.1f}{suffix}"
            return f"{value:.2f}{suffix}"

    return str(int(size_bytes))


def format_rate(bytes_per_second: float) -> str:
    """Format a throughput as e.g. "1.20M/s"."""
    return f"{format_bytes(bytes_per_second)}/s"


def format_duration(seconds: int | float) -> str:
    """Format an uptime.

    Args:
        seconds: Duration in seconds

    Returns:
        "HH:MM:SS" below one day, "Nd HHh" above
    """
    total = max(0, int(seconds))
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, secs = divmod(rest, 60)
    if days:
        return f"{days}d {hours:02d}h"
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_percent(fraction: float, decimals: int = 1) -> str:
    """Format a fraction (1.0 = 100%) as a percentage string."""
    return f"{fraction * 100:.{decimals}f}%"


def get_usage_color(fraction: float) -> str:
    """Get the Rich color name for a usage fraction.

    Args:
        fraction: Usage as a fraction (0-1)

    Returns:
        Color name: 'red', 'bright_red', 'yellow' or 'green'
    """
    if fraction > THRESHOLD_CRITICAL:
        return "red"
    if fraction > THRESHOLD_HIGH:
        return "bright_red"
    if fraction > THRESHOLD_MEDIUM:
        return "yellow"
    return "green"


def apply_scroll(text: str, scroll: int) -> str:
    """Drop the first `scroll` characters of a text.

    Args:
        text: Text to scroll
        scroll: Number of leading characters to hide (<= 0 keeps the text)

    Returns:
        The visible part of the text
    """
    if scroll <= 0:
        return text
    return text[scroll:]
