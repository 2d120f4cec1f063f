"""
Loads the JSON feeds into an immutable catalog snapshot.

The search core never reads files itself. It receives a `CatalogSnapshot`
built here, tagged with a version derived from the feed contents, and the
loader keeps exactly one cached snapshot per process which is rebuilt
wholesale whenever the tag changes.
"""
from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .config import Settings, settings
from .logger import get_logger
from .models import FAQCategory, KnowledgeGraph, MatchRecord, Situation

logger = get_logger(__name__)

_records_adapter = TypeAdapter(List[MatchRecord])
_situations_adapter = TypeAdapter(List[Situation])
_faq_adapter = TypeAdapter(List[FAQCategory])


class DataLoadError(Exception):
    """Raised when a feed is missing, unreadable or malformed."""


class CatalogSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: str
    category: str = ""
    records: Tuple[MatchRecord, ...] = ()
    graph: KnowledgeGraph = Field(default_factory=KnowledgeGraph)
    situations: Tuple[Situation, ...] = ()
    faq: Tuple[FAQCategory, ...] = ()


def _unwrap(payload: Any, key: str) -> Any:
    if isinstance(payload, dict):
        return payload.get(key, [])
    return payload


def version_tag(*chunks: bytes) -> str:
    digest = hashlib.sha256()
    for chunk in chunks:
        digest.update(len(chunk).to_bytes(8, "little"))
        digest.update(chunk)
    return digest.hexdigest()[:16]


def build_snapshot(
    matching: Any,
    graph: Any,
    situations: Any = None,
    faq: Any = None,
    category: str = "",
    version: Optional[str] = None,
) -> CatalogSnapshot:
    """
    Validate already-parsed feed payloads into a snapshot.

    `matching` may be the raw feed object (records under `matching_results`)
    or a bare list; the same holds for `situations` and `faq`.
    """
    try:
        records = _records_adapter.validate_python(_unwrap(matching, "matching_results"))
        knowledge_graph = KnowledgeGraph.model_validate(graph or {})
        situation_list = _situations_adapter.validate_python(_unwrap(situations or [], "situations"))
        faq_list = _faq_adapter.validate_python(_unwrap(faq or [], "faq_categories"))
    except ValidationError as exc:
        raise DataLoadError(f"Malformed catalog feed: {exc}") from exc
    if version is None:
        version = version_tag(
            *(
                json.dumps(part, sort_keys=True, ensure_ascii=False, default=str).encode("utf-8")
                for part in (matching, graph, situations, faq)
            )
        )
    return CatalogSnapshot(
        version=version,
        category=category,
        records=tuple(records),
        graph=knowledge_graph,
        situations=tuple(situation_list),
        faq=tuple(faq_list),
    )


class CatalogLoader:
    def __init__(self, data_dir: Optional[Path] = None, category: Optional[str] = None) -> None:
        self.settings: Settings = settings.model_copy(
            update={
                "data_dir": Path(data_dir) if data_dir is not None else settings.data_dir,
                "category": category or settings.category,
            }
        )
        self._cached: Optional[CatalogSnapshot] = None

    def _read(self, path: Path, required: bool = True) -> bytes:
        if not path.exists():
            if required:
                logger.error("feed missing", extra={"path": str(path)})
                raise DataLoadError(f"Feed not found: {path}")
            return b""
        return path.read_bytes()

    def _parse(self, raw: bytes, path: Path) -> Any:
        if not raw:
            return None
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.error("feed unreadable", extra={"path": str(path), "error": str(exc)})
            raise DataLoadError(f"Cannot parse {path}: {exc}") from exc

    def load(self) -> CatalogSnapshot:
        """
        Return the current snapshot, rebuilding it only when the feeds changed.
        """
        paths = [
            (self.settings.matching_results_path(), True),
            (self.settings.knowledge_graph_path(), True),
            (self.settings.situations_path(), True),
            (self.settings.faq_path(), False),
        ]
        raw = [self._read(path, required) for path, required in paths]
        version = version_tag(*raw)
        if self._cached is not None and self._cached.version == version:
            return self._cached

        matching, graph, situations, faq = (
            self._parse(chunk, path) for chunk, (path, _) in zip(raw, paths)
        )
        try:
            snapshot = build_snapshot(
                matching,
                graph,
                situations,
                faq,
                category=self.settings.category,
                version=version,
            )
        except DataLoadError:
            logger.error("feed validation failed", extra={"category": self.settings.category})
            raise
        self._cached = snapshot
        logger.info(
            "catalog loaded",
            extra={
                "category": snapshot.category,
                "version": snapshot.version,
                "records": len(snapshot.records),
                "nodes": len(snapshot.graph.nodes),
                "links": len(snapshot.graph.links),
                "situations": len(snapshot.situations),
            },
        )
        return snapshot

    def invalidate(self) -> None:
        self._cached = None
