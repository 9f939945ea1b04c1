"""Shared environment lookup for the MailboxTools suite.

Values come from the process environment, with a ``.env`` file in the working
directory loaded first (existing variables win).
"""

from __future__ import annotations
import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv(override=False)


def env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Return the value of *key*, or *default* when unset or blank."""
    value = os.environ.get(key)
    if value is None or not value.strip():
        return default
    return value.strip()
