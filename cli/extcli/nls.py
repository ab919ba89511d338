"""Message formatting and localization for extcli.

Messages are written as templates with positional ``{0}``, ``{1}`` holes.
A JSON bundle mapping message keys to translated templates can replace the
built-in English text.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{(\d+)\}")


def format_message(template: str, *args: Any) -> str:
    """Fill positional placeholders in a template.

    Placeholders without a matching argument are left untouched.
    """

    def _sub(match: re.Match) -> str:
        index = int(match.group(1))
        if index < len(args):
            return str(args[index])
        return match.group(0)

    return _PLACEHOLDER.sub(_sub, template)


class Localizer:
    """Resolve message keys through an optional bundle."""

    def __init__(self, bundle: Optional[dict[str, str]] = None):
        self.bundle = bundle or {}

    @classmethod
    def from_file(cls, path: Path) -> "Localizer":
        """Load a JSON message bundle.

        A missing or unreadable bundle falls back to the built-in messages.
        """
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not load message bundle {path}: {e}")
            return cls()

        if not isinstance(data, dict):
            logger.warning(f"Message bundle {path} is not a JSON object")
            return cls()

        return cls({str(k): str(v) for k, v in data.items()})

    def localize(self, key: str, default: str, *args: Any) -> str:
        template = self.bundle.get(key, default)
        return format_message(template, *args)


default_localizer = Localizer()
