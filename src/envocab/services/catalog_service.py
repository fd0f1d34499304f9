"""Service for loading the word catalog and merging it with review progress."""
import asyncio
import json
import logging
import re
from collections import defaultdict
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from envocab.config import settings
from envocab.models.entries import CatalogGroup, CatalogWord, RuntimeEntry
from envocab.models.snapshot import MemoryStatus, ProgressRecord
from envocab.services.scheduler_service import SchedulerService

logger = logging.getLogger(__name__)

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_valid_date_format(date_str: str) -> bool:
    """Check that the string is a real calendar date in YYYY-MM-DD form."""
    if not DATE_PATTERN.match(date_str):
        return False
    try:
        date.fromisoformat(date_str)
    except ValueError:
        return False
    return True


def generate_word_id(added_date: str, word: str) -> str:
    """Build the id of a word; the same word on the same day always gets the same id."""
    return f"{added_date}_{word}"


def words_by_date(entries: Iterable[RuntimeEntry]) -> List[Tuple[str, List[RuntimeEntry]]]:
    """Group entries by the day they were added, newest day first."""
    grouped: Dict[str, List[RuntimeEntry]] = defaultdict(list)
    for entry in entries:
        grouped[entry.added_date].append(entry)
    return sorted(grouped.items(), key=lambda item: item[0], reverse=True)


def _apply_progress(entry: RuntimeEntry, record: ProgressRecord) -> RuntimeEntry:
    return replace(
        entry,
        stage=record.stage,
        next_review_at=record.next_review_at,
        memory_status=record.memory_status,
        last_reviewed_at=record.last_reviewed_at,
    )


class CatalogService:
    """Service for turning catalog files into runtime review entries."""

    def __init__(self, scheduler: SchedulerService, catalog_dir: Optional[Path] = None):
        """Initialize the service with a scheduler and the catalog location."""
        self.scheduler = scheduler
        self.catalog_dir = Path(catalog_dir) if catalog_dir is not None else settings.paths.catalog_dir

    def load_catalog(self, directory: Optional[Path] = None) -> List[CatalogGroup]:
        """Read every YYYY-MM-DD.json file of the catalog directory.

        Files with a bad name or content and words with missing fields are
        skipped. Groups are returned newest first.
        """
        directory = Path(directory) if directory is not None else self.catalog_dir
        if not directory.is_dir():
            logger.warning(f"Catalog directory {directory} does not exist")
            return []

        groups = []
        for path in sorted(directory.glob("*.json")):
            if not is_valid_date_format(path.stem):
                logger.warning(f"Skipping file with invalid name: {path}")
                continue

            try:
                raw_words = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
                logger.warning(f"Skipping unreadable file {path}: {e}")
                continue

            if not isinstance(raw_words, list):
                logger.warning(f"Skipping file that is not a list: {path}")
                continue

            words = []
            for raw_word in raw_words:
                try:
                    words.append(CatalogWord.model_validate(raw_word))
                except ValidationError:
                    logger.warning(f"Skipping invalid word in {path}: {raw_word!r}")
            groups.append(CatalogGroup(date=path.stem, words=words))

        logger.info(f"Loaded {sum(len(group.words) for group in groups)} words from {len(groups)} files")
        return sorted(groups, key=lambda group: group.date, reverse=True)

    def create_entry(self, word: CatalogWord, added_date: str) -> RuntimeEntry:
        """Create the entry of a word that has never been reviewed."""
        return RuntimeEntry(
            id=generate_word_id(added_date, word.word),
            word=word.word,
            meaning=word.meaning,
            example=word.example,
            added_date=added_date,
            stage=0,
            next_review_at=self.scheduler.calculate_initial_review(added_date),
            memory_status=MemoryStatus.NEW,
        )

    def merge_with_progress(
        self, groups: Iterable[CatalogGroup], progress: Iterable[ProgressRecord]
    ) -> List[RuntimeEntry]:
        """Combine catalog words with their stored progress.

        Words without a progress record start at stage 0. When the same word
        appears twice on one day, the one processed last wins.
        """
        progress_map = {record.id: record for record in progress}
        entries: Dict[str, RuntimeEntry] = {}

        for group in groups:
            for word in group.words:
                entry = self.create_entry(word, group.date)
                record = progress_map.get(entry.id)
                entries[entry.id] = _apply_progress(entry, record) if record else entry

        return list(entries.values())

    async def load_groups(self) -> List[CatalogGroup]:
        """Load the catalog without blocking the event loop."""
        return await asyncio.to_thread(self.load_catalog)
