"""
Resolve the ``model`` field of a request to a name the CLI accepts.

Resolution order:
1. Empty, or the proxy's own advertised id -> configured default
   (a ``claude-code/`` or ``claude-code-`` prefix is dropped first)
2. Full names starting with ``claude-`` -> passed through unchanged
3. Names containing a tier (``opus``, ``sonnet``, ``haiku``) -> that tier
4. Anything else -> configured default, with a warning
"""

import logging
from typing import Optional

from proxy_constants import PROXY_MODEL_ID

logger = logging.getLogger(__name__)

VENDOR_MODEL_PREFIX = "claude-"
MODEL_TIERS = ("opus", "sonnet", "haiku")


def resolve_model(requested: Optional[str], default: str) -> str:
    name = (requested or "").strip()
    # Provider-qualified ids as sent by some clients: "claude-code/opus",
    # "claude-code-opus". Either way the rest names the model.
    for separator in ("/", "-"):
        if name.lower().startswith(PROXY_MODEL_ID + separator):
            name = name[len(PROXY_MODEL_ID) + 1:].strip()
            break
    if not name or name.lower() == PROXY_MODEL_ID:
        return default

    lowered = name.lower()
    if lowered.startswith(VENDOR_MODEL_PREFIX):
        return name

    for tier in MODEL_TIERS:
        if tier in lowered:
            return tier

    logger.warning("Unknown model '%s' - using default '%s'", name, default)
    return default
