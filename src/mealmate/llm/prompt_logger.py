"""
MealMate - Prompt Logger.

Writes text-extraction prompts and responses to markdown files for
debugging. Enabled via MEALMATE_LOG_PROMPTS=1 or the --log-prompts CLI flag.
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any

LOG_PROMPTS = os.getenv("MEALMATE_LOG_PROMPTS", "0") == "1"
LOG_DIR = Path("prompt_logs")

_session_id: str | None = None
_call_counter: int = 0


def enable_prompt_logging(enabled: bool = True) -> None:
    """Enable or disable prompt logging."""
    global LOG_PROMPTS
    LOG_PROMPTS = enabled
    if enabled:
        LOG_DIR.mkdir(exist_ok=True)


def is_enabled() -> bool:
    return LOG_PROMPTS


def _get_session_dir() -> Path:
    global _session_id
    if _session_id is None:
        _session_id = datetime.now().strftime("%Y%m%d_%H%M%S")
    session_dir = LOG_DIR / _session_id
    session_dir.mkdir(parents=True, exist_ok=True)
    return session_dir


def log_prompt(
    *,
    purpose: str,
    model: str,
    system_prompt: str,
    user_prompt: str,
    response: Any = None,
    error: str | None = None,
) -> Path | None:
    """
    Log a prompt and its response to a file.

    Args:
        purpose: What the call was for (e.g. "text_extraction_social_media")
        model: Model name sent to the provider
        system_prompt: The system prompt
        user_prompt: The user prompt
        response: Raw response text or parsed dict (optional)
        error: Any error that occurred (optional)

    Returns:
        Path to the log file, or None if logging is disabled
    """
    if not LOG_PROMPTS:
        return None

    global _call_counter
    _call_counter += 1

    filepath = _get_session_dir() / f"{_call_counter:02d}_{purpose}.md"

    content = f"""# LLM Call: {purpose}

**Time:** {datetime.now().isoformat()}
**Model:** {model}

---

## System Prompt

```
{system_prompt}
```

---

## User Prompt

```
{user_prompt}
```

---

## Response

"""

    if error:
        content += f"**ERROR:** {error}\n"
    elif isinstance(response, (dict, list)):
        content += f"```json\n{json.dumps(response, indent=2, default=str)}\n```\n"
    elif response:
        content += f"```\n{response}\n```\n"
    else:
        content += "(No response)\n"

    filepath.write_text(content, encoding="utf-8")
    return filepath


def reset_session() -> None:
    """Reset the session (for testing)."""
    global _session_id, _call_counter
    _session_id = None
    _call_counter = 0
