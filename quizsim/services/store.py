from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger
from pydantic import ValidationError

from ..schemas import Question, TopicRecord
from .keys import PART_SEP, humanize, normalize, storage_key

# 1: one file per "topic_subtopic_words.json"
# 2: one file per normalized (topic, subtopic, grade, curriculum) joined by "__"
LAYOUT_VERSION = 2
VERSION_FILE = ".layout-version"


def _read_records(path: Path) -> List[Dict[str, Any]]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path.name} does not hold a JSON array")
    return [r for r in data if isinstance(r, dict)]

def _write_records(path: Path, records: List[Dict[str, Any]]):
    path.write_text(json.dumps(records, ensure_ascii=False, indent=2), encoding="utf-8")

def _merge(existing: List[Dict[str, Any]], incoming: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    seen = {r.get("question") for r in existing}
    merged = list(existing)
    for r in incoming:
        if r.get("question") not in seen:
            seen.add(r.get("question"))
            merged.append(r)
    return merged


class QuestionStore:
    """File-backed question cache, one JSON array per storage key."""

    def __init__(self, root: str | Path):
        self.root = Path(root)
        fresh = not self.root.exists() or not any(self.root.iterdir())
        self.root.mkdir(parents=True, exist_ok=True)
        if fresh:
            # nothing legacy can exist in a brand-new directory
            self._set_layout_version(LAYOUT_VERSION)

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def _load(self, path: Path) -> List[Dict[str, Any]]:
        if not path.exists():
            return []
        try:
            return _read_records(path)
        except (OSError, ValueError) as e:
            logger.warning(f"[store] unreadable question file {path.name}: {e}")
            return []

    # ---------- reads ----------
    def fetch_questions(self, topic: str, subtopic: Optional[str] = None,
                        grade: Optional[str] = None, curriculum: Optional[str] = None) -> List[Question]:
        key = storage_key(topic, subtopic, grade, curriculum)
        out: List[Question] = []
        for i, raw in enumerate(self._load(self._path(key)), start=1):
            try:
                out.append(Question.model_validate({"id": f"q{i}", **raw}))
            except ValidationError:
                logger.warning(f"[store] skipping invalid record #{i} in {key}")
        return out

    def list_topics(self) -> List[TopicRecord]:
        counts: Dict[tuple, int] = {}
        for path in sorted(self.root.glob("*.json")):
            records = self._load(path)
            if not records:
                # no tags to tell the grade/curriculum parts from a subtopic
                continue
            topic, subtopic = _split_key(path.stem, records)
            counts[(topic, subtopic)] = counts.get((topic, subtopic), 0) + len(records)

        topics = [TopicRecord(topic=t, subtopic=s, question_count=n) for (t, s), n in counts.items()]
        # subtopic-less entry first within a topic
        topics.sort(key=lambda r: (r.topic, r.subtopic is not None, r.subtopic or ""))
        return topics

    # ---------- writes ----------
    def save_question(self, topic: str, subtopic: Optional[str], grade: str,
                      curriculum: Optional[str], question: Question) -> bool:
        path = self._path(storage_key(topic, subtopic, grade, curriculum))
        records = self._load(path)
        if any(r.get("question") == question.question for r in records):
            return False
        records.append(question.model_dump(by_alias=True, mode="json"))
        try:
            _write_records(path, records)
        except OSError as e:
            logger.warning(f"[store] could not write {path.name}: {e}")
            return False
        return True

    # ---------- layout migration ----------
    def layout_version(self) -> int:
        try:
            return int((self.root / VERSION_FILE).read_text(encoding="utf-8").strip())
        except (OSError, ValueError):
            return 1

    def _set_layout_version(self, version: int):
        (self.root / VERSION_FILE).write_text(f"{version}\n", encoding="utf-8")

    def migrate(self) -> int:
        """Re-key legacy single-component files. Runs once; returns files moved."""
        if self.layout_version() >= LAYOUT_VERSION:
            return 0

        moved = 0
        for path in sorted(self.root.glob("*.json")):
            # "__" was already the separator before the marker existed; ambiguous
            # legacy names such as "c__pointers" stay where they are
            if PART_SEP in path.stem:
                continue
            try:
                legacy = _read_records(path)
            except (OSError, ValueError) as e:
                logger.error(f"[migrate] leaving {path.name} in place: {e}")
                continue
            if not legacy:
                continue

            words = [w for w in path.stem.split("_") if w]
            try:
                target = self._path(storage_key(words[0] if words else "", " ".join(words[1:]) or None))
            except ValueError as e:
                logger.error(f"[migrate] leaving {path.name} in place: {e}")
                continue
            if target == path:
                continue

            try:
                if not target.exists():
                    path.rename(target)
                else:
                    _write_records(target, _merge(self._load(target), legacy))
                    path.unlink()
            except OSError as e:
                logger.error(f"[migrate] failed to move {path.name} -> {target.name}: {e}")
                continue
            logger.info(f"[migrate] {path.name} -> {target.name}")
            moved += 1

        self._set_layout_version(LAYOUT_VERSION)
        return moved


def _split_key(key: str, records: List[Dict[str, Any]]) -> tuple:
    """Recover (topic, subtopic) from a key, using the records' grade/curriculum tags."""
    parts = key.split(PART_SEP)
    if records:
        first = records[0]
        for tag in (first.get("curriculum"), first.get("gradeLevel")):
            if tag and len(parts) > 1 and parts[-1] == normalize(tag):
                parts.pop()
    topic = humanize(parts[0])
    subtopic = humanize(" ".join(parts[1:])) if len(parts) > 1 else None
    return topic, subtopic
