"""
In-memory cache of the team alias table.

The alias table is small and read on every normalization, so it is held in
memory and replaced wholesale on refresh. Readers grab the current mapping
reference and never see a half-built one.
"""

import logging
import threading

logger = logging.getLogger(__name__)


def load_aliases_from_db():
    """Read (alias, canonical_name) pairs from the team_aliases table"""
    # Imported here so the cache module stays importable before the models
    from ats_pickem import db
    from ats_pickem.models import TeamAlias

    rows = db.session.execute(db.select(TeamAlias.alias, TeamAlias.canonical_name))
    return [(alias, canonical) for alias, canonical in rows]


class AliasSnapshot:
    """Immutable view of the alias table at one point in time"""

    def __init__(self, pairs):
        aliases = {}
        canonicals = {}

        for alias, canonical in pairs:
            if not alias or not canonical:
                continue
            canonical = canonical.strip()
            aliases[alias.strip().casefold()] = canonical
            canonicals.setdefault(canonical.casefold(), canonical)

        # Canonical names resolve to themselves even without their own alias row
        for key, canonical in canonicals.items():
            aliases.setdefault(key, canonical)

        self._aliases = aliases
        self._canonical_names = frozenset(canonicals.values())

    def __len__(self):
        return len(self._aliases)

    def lookup(self, name):
        return self._aliases.get(name.casefold())

    @property
    def canonical_names(self):
        return self._canonical_names


class AliasCache:
    """Process-scoped alias cache with an explicit load/refresh lifecycle"""

    def __init__(self, loader=None):
        self._loader = loader or load_aliases_from_db
        self._snapshot = None
        self._lock = threading.Lock()

    def init_app(self, app):
        """Bind the cache to an application, dropping any previous snapshot"""
        app.extensions["alias_cache"] = self
        with self._lock:
            self._snapshot = None

    @property
    def is_loaded(self):
        return self._snapshot is not None

    def load(self):
        """Load the table if it has not been loaded yet"""
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot
        return self.refresh()

    def refresh(self):
        """Rebuild the cache from the loader and swap it in"""
        with self._lock:
            logger.info("Refreshing team alias cache")
            # Loader errors propagate: a missing alias table is fatal
            snapshot = AliasSnapshot(self._loader())
            self._snapshot = snapshot
            logger.info(f"Loaded {len(snapshot)} team aliases into cache")
            return snapshot
