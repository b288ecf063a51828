"""
A small document store on top of JSON files.

Documents are addressed by slash-separated paths such as
``communityRooms/math/members/u1``; an odd number of segments names a
collection, an even number a document. Each top-level collection lives in its
own ``<root>.json`` file, guarded by a re-entrant lock so that a
``transaction(root)`` block can read and then write without interleaving.
"""

import copy
import json
import logging
import os
import threading
from contextlib import contextmanager

from studymate.errors import NotFoundError
from studymate.utils.helpers import _new_id, _utcnow_iso

logger = logging.getLogger(__name__)


class Increment:
    def __init__(self, amount=1):
        self.amount = amount


class _ServerTimestamp:
    def __repr__(self):
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


def _split(path, want_document):
    segments = [s for s in str(path).strip("/").split("/")]
    if not segments or any(not s or s in (".", "..") for s in segments):
        raise ValueError(f"invalid store path: {path!r}")
    is_document = len(segments) % 2 == 0
    if is_document != want_document:
        kind = "document" if want_document else "collection"
        raise ValueError(f"{path!r} is not a {kind} path")
    return segments


def _new_node():
    return {"fields": None, "collections": {}}


class DataService:
    def __init__(self, data_dir):
        self.data_dir = data_dir
        os.makedirs(data_dir, exist_ok=True)
        self._locks = {}
        self._global_lock = threading.Lock()

    def _get_lock(self, root):
        with self._global_lock:
            if root not in self._locks:
                self._locks[root] = threading.RLock()
            return self._locks[root]

    def _file_for(self, root):
        return os.path.join(self.data_dir, f"{root}.json")

    def _load_json(self, path, default=None):
        if not os.path.exists(path):
            return default if default is not None else {}
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _save_json(self, path, data):
        tmp_path = path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)

    def _walk(self, tree, segments, create):
        """Return the node for a document path, or the docs dict for a collection path."""
        docs = tree
        node = None
        for i, seg in enumerate(segments[1:], start=1):
            if i % 2 == 1:
                node = docs.get(seg)
                if node is None:
                    if not create:
                        return None
                    node = docs[seg] = _new_node()
            else:
                sub = node["collections"].get(seg)
                if sub is None:
                    if not create:
                        return None
                    sub = node["collections"][seg] = {}
                docs = sub
        return node if len(segments) % 2 == 0 else docs

    def _resolve(self, fields, existing):
        out = dict(existing or {})
        for key, value in fields.items():
            if isinstance(value, Increment):
                current = out.get(key, 0)
                if not isinstance(current, (int, float)) or isinstance(current, bool):
                    current = 0
                out[key] = current + value.amount
            elif value is SERVER_TIMESTAMP:
                out[key] = _utcnow_iso()
            else:
                out[key] = copy.deepcopy(value)
        return out

    @contextmanager
    def transaction(self, root):
        lock = self._get_lock(root)
        with lock:
            yield self

    def get(self, path):
        segments = _split(path, want_document=True)
        with self._get_lock(segments[0]):
            tree = self._load_json(self._file_for(segments[0]))
            node = self._walk(tree, segments, create=False)
            if node is None or node["fields"] is None:
                return None
            return copy.deepcopy(node["fields"])

    def exists(self, path):
        return self.get(path) is not None

    def set(self, path, data, merge=False):
        segments = _split(path, want_document=True)
        file_path = self._file_for(segments[0])
        with self._get_lock(segments[0]):
            tree = self._load_json(file_path)
            node = self._walk(tree, segments, create=True)
            base = node["fields"] if merge else None
            node["fields"] = self._resolve(data, base)
            self._save_json(file_path, tree)
            return copy.deepcopy(node["fields"])

    def create(self, path, data):
        """Write ``data`` only if the document does not exist yet. Returns True if written."""
        segments = _split(path, want_document=True)
        with self.transaction(segments[0]):
            if self.exists(path):
                return False
            self.set(path, data)
            return True

    def update(self, path, fields):
        segments = _split(path, want_document=True)
        file_path = self._file_for(segments[0])
        with self._get_lock(segments[0]):
            tree = self._load_json(file_path)
            node = self._walk(tree, segments, create=False)
            if node is None or node["fields"] is None:
                raise NotFoundError(f"No document at {path}")
            node["fields"] = self._resolve(fields, node["fields"])
            self._save_json(file_path, tree)
            return copy.deepcopy(node["fields"])

    def add(self, collection_path, data):
        _split(collection_path, want_document=False)
        doc_id = _new_id()
        self.set(f"{collection_path}/{doc_id}", data)
        return doc_id

    def list(self, collection_path, order_by=None, descending=False, limit=None):
        segments = _split(collection_path, want_document=False)
        with self._get_lock(segments[0]):
            tree = self._load_json(self._file_for(segments[0]))
            docs = self._walk(tree, segments, create=False) or {}
            items = [
                {"id": doc_id, **copy.deepcopy(node["fields"])}
                for doc_id, node in docs.items()
                if node.get("fields") is not None
            ]
        if order_by:
            items.sort(key=lambda d: (d.get(order_by) is not None, d.get(order_by)), reverse=descending)
        if limit is not None:
            items = items[:limit]
        return items

    def delete(self, path):
        segments = _split(path, want_document=True)
        file_path = self._file_for(segments[0])
        with self._get_lock(segments[0]):
            tree = self._load_json(file_path)
            parent = self._walk(tree, segments[:-1], create=False) if len(segments) > 2 else tree
            if not parent or segments[-1] not in parent:
                return False
            del parent[segments[-1]]
            self._save_json(file_path, tree)
            return True
