"""Session identity shim.

Turns a display name into a cosmetic account label. Nothing is verified.
"""

from __future__ import annotations

import random

from models.session import SessionLabel

ACCOUNT_PREFIX = "FNT"


def login(display_name: str, rng: random.Random | None = None) -> SessionLabel | None:
    """Return a ``SessionLabel`` for *display_name*, or ``None`` if it is blank.

    The account id is ``FNT-<first three letters, upper-cased>-<1000..9999>``.
    """
    if not display_name or not display_name.strip():
        return None

    rng = rng or random.Random()
    suffix = rng.randint(1000, 9999)
    account_id = f"{ACCOUNT_PREFIX}-{display_name[:3].upper()}-{suffix}"
    return SessionLabel(name=display_name, account_id=account_id)
