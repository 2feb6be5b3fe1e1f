"""Load a skill's SKILL.md for injection into the prompt.

Skill files refer to their own scripts through a ``<SKILL_ROOT>``
placeholder. The root is the directory holding SKILL.md, one level up when
the file sits in a ``clawdbot-skill/`` subdirectory.
"""

import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)

SKILL_FILE_NAME = "SKILL.md"
SKILL_SUBDIR_NAME = "clawdbot-skill"
SKILL_ROOT_PLACEHOLDER = "<SKILL_ROOT>"


def skill_root_for(path: str) -> str:
    root = path
    suffix = "/" + SKILL_FILE_NAME
    if root.endswith(suffix):
        root = root[: -len(suffix)]
    subdir = "/" + SKILL_SUBDIR_NAME
    if root.endswith(subdir):
        root = root[: -len(subdir)]
    return root


def load_skill_instructions(location: str) -> Optional[str]:
    """Read a skill file, expanding ``~`` and resolving ``<SKILL_ROOT>``.

    Returns None (after logging) when the file cannot be read, so the caller
    can carry on without the skill.
    """
    path = os.path.expanduser(location)
    try:
        with open(path, encoding="utf-8") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read skill file %s: %s", location, e)
        return None

    root = skill_root_for(path)
    logger.info("SKILL_ROOT resolved to: %s", root)
    return content.replace(SKILL_ROOT_PLACEHOLDER, root)
