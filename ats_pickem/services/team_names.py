"""
Team name normalization

Line sources, result providers and admins spell team names differently
("USF", "South Florida", "So Florida"). Every comparison of team names goes
through TeamNameNormalizer so they resolve to one canonical spelling.
"""

import logging

from ats_pickem import db
from ats_pickem.models import TeamAlias

logger = logging.getLogger(__name__)


class TeamNameNormalizer:
    """Resolve raw team names to canonical names using an AliasCache"""

    def __init__(self, cache):
        self.cache = cache

    def _resolve(self, trimmed_name):
        """Canonical name for an already-trimmed name, or None when unknown"""
        snapshot = self.cache.load()
        return snapshot.lookup(trimmed_name)

    def normalize(self, name):
        """
        Return the canonical name for a team.

        Unknown names are passed through unchanged (trimmed) with a warning;
        normalization never blocks a caller. Empty input returns "".
        """
        if not name or not name.strip():
            return ""

        trimmed_name = name.strip()
        canonical_name = self._resolve(trimmed_name)

        if canonical_name is None:
            logger.warning(
                f"Unknown team '{trimmed_name}' - no alias mapping found. Passing through unchanged."
            )
            return trimmed_name

        if canonical_name.casefold() != trimmed_name.casefold():
            logger.debug(f"Normalized team name '{trimmed_name}' to '{canonical_name}'")

        return canonical_name

    def normalize_batch(self, names):
        """
        Map each name, exactly as passed in, to its canonical name

        Blank names are left out. Spellings that only differ in surrounding
        whitespace are looked up (and warned about) once.
        """
        result = {}
        by_trimmed = {}

        for name in names:
            if not name or not name.strip():
                continue

            trimmed_name = name.strip()
            if trimmed_name not in by_trimmed:
                by_trimmed[trimmed_name] = self.normalize(trimmed_name)

            result[name] = by_trimmed[trimmed_name]

        return result

    def are_equal(self, first, second):
        """True when both names resolve to the same team"""
        return self.normalize(first).casefold() == self.normalize(second).casefold()

    def all_canonical_names(self):
        return set(self.cache.load().canonical_names)

    def refresh(self):
        """Reload aliases so administrative edits take effect"""
        self.cache.refresh()

    def add_alias(self, alias, canonical_name):
        """Create or repoint an alias and reload the cache"""
        if not alias or not alias.strip() or not canonical_name or not canonical_name.strip():
            raise ValueError("Alias and canonical name are required")

        row = TeamAlias.upsert(alias, canonical_name)
        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info(f"Alias '{row.alias}' now maps to '{row.canonical_name}'")
        self.refresh()
        return row
