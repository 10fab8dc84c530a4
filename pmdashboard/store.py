# store.py — Persistence boundary: DashboardDocument rows as the document store,
# Django cache as the local mirror, and DashboardRepository tying both to DashboardState.

import copy
import json
import logging

from django.core.cache import cache as default_cache
from django.db import DatabaseError, transaction

from .models import (
    CACHE_KEYS,
    DOC_DAILY,
    DOC_HISTORY,
    DOC_MILESTONES,
    DOC_RESOURCING,
    DOC_WEEKLY,
    STORE_PATHS,
    DashboardDocument,
)
from .state import DashboardState

logger = logging.getLogger(__name__)

STATE_DOCUMENTS = (DOC_MILESTONES, DOC_WEEKLY, DOC_DAILY, DOC_RESOURCING)
# rebuilt wholesale on every recompute, so never merged into the stored copy
REPLACED_DOCUMENTS = (DOC_RESOURCING,)


def deep_merge(base, update):
    """Nested dicts are merged key by key; lists and scalars from ``update`` replace."""
    result = copy.deepcopy(base) if isinstance(base, dict) else {}
    for key, value in (update or {}).items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


class DocumentStore:
    """get(path) / set(path, document, merge) over the DashboardDocument table."""

    def get(self, path):
        row = DashboardDocument.objects.filter(path=path).first()
        if row is None:
            return None
        return row.data if isinstance(row.data, dict) else {}

    def set(self, path, document, merge=False):
        with transaction.atomic():
            row = DashboardDocument.objects.select_for_update().filter(path=path).first()
            if row is None:
                DashboardDocument.objects.create(path=path, data=copy.deepcopy(document or {}))
                return
            row.data = deep_merge(row.data, document) if merge else copy.deepcopy(document or {})
            row.save(update_fields=["data", "updated_at"])


class LocalCache:
    """JSON text in Django's cache, like a browser localStorage mirror."""

    def __init__(self, backend=None, timeout=None):
        self.backend = backend or default_cache
        self.timeout = timeout

    def get(self, key, fallback=None):
        try:
            raw = self.backend.get(key)
            return json.loads(raw) if raw else fallback
        except Exception as e:
            logger.warning("[cache] could not read %s: %s", key, e)
            return fallback

    def set(self, key, value):
        try:
            self.backend.set(key, json.dumps(value, default=str), timeout=self.timeout)
        except Exception as e:
            logger.warning("[cache] could not write %s: %s", key, e)


class DashboardRepository:
    """
    Loads and saves DashboardState.

    Reads come from the cache first and are then refreshed from the store when it holds a
    non-empty document (the store copy is mirrored back into the cache). Writes always go to
    the cache; a failed store write is logged and swallowed so the session keeps its data.
    """

    def __init__(self, store=None, local_cache=None):
        self.store = store or DocumentStore()
        self.cache = local_cache or LocalCache()

    def _read_store(self, name):
        path = STORE_PATHS[name]
        try:
            return self.store.get(path)
        except DatabaseError as e:
            logger.warning("[store] read failed for %s: %s", path, e)
            return None

    def _write_store(self, name, document, merge=True):
        path = STORE_PATHS[name]
        try:
            self.store.set(path, document, merge=merge)
            return True
        except DatabaseError:
            logger.exception("[store] write failed for %s", path)
            return False

    def load_document(self, name):
        cache_key = CACHE_KEYS.get(name)
        document = self.cache.get(cache_key, {}) if cache_key else {}
        if not isinstance(document, dict):
            document = {}
        # a failed store write leaves the cache as the newer copy
        if cache_key and self.cache.get(f"{cache_key}:unsynced", False):
            return document
        stored = self._read_store(name)
        if isinstance(stored, dict) and stored:
            document = stored
            if cache_key:
                self.cache.set(cache_key, document)
        return document

    def load_state(self):
        documents = {name: self.load_document(name) for name in STATE_DOCUMENTS}
        return DashboardState(
            milestones=documents[DOC_MILESTONES],
            weekly_plans=documents[DOC_WEEKLY],
            daily_logs=documents[DOC_DAILY],
            resourcing=documents[DOC_RESOURCING],
        )

    def save(self, state, *names, merge=True):
        """يحفظ الدوكيومنتات المطلوبة (أو كلها) في الكاش ثم الـ store."""
        documents = state.documents()
        ok = True
        for name in names or STATE_DOCUMENTS:
            document = documents[name]
            cache_key = CACHE_KEYS[name]
            self.cache.set(cache_key, document)
            written = self._write_store(name, document, merge=merge and name not in REPLACED_DOCUMENTS)
            self.cache.set(f"{cache_key}:unsynced", not written)
            ok = written and ok
        return ok

    def load_history(self):
        history = self._read_store(DOC_HISTORY)
        return history if isinstance(history, dict) else {}

    def snapshot_week(self, week, snapshot):
        """Writes history[week] = snapshot into dashboard/history/weeks."""
        history = self.load_history()
        history[week] = snapshot
        return self._write_store(DOC_HISTORY, history)
