"""reelbuilder.common -- small shared helpers.

Contains: path variable resolution for manifests and duration formatting
for clip labels.
"""

import re


# ── Path utilities ─────────────────────────────────────────────────

def resolve_path_vars(text: str, paths: dict[str, str]) -> str:
    """Replace ${name} variables in a string using the paths dict."""
    def _replace(match):
        key = match.group(1)
        if key not in paths:
            raise ValueError(f"Unknown path variable: ${{{key}}}")
        return str(paths[key])
    return re.sub(r"\$\{(\w+)\}", _replace, text)


# ── Display ────────────────────────────────────────────────────────

def format_duration(seconds: float) -> str:
    """Format seconds as m:ss (fractions truncated), e.g. 75.9 -> '1:15'."""
    total = int(max(0.0, seconds))
    return f"{total // 60}:{total % 60:02d}"
