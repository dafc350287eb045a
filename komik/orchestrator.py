from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .chapters import ChapterRef
from .config import DownloaderConfig
from .engine import ChapterEngine, ChapterOutcome, ChapterReport
from .errors import InvalidSelection
from .history import HistoryLedger
from .log import log_error, log_verbose
from .resume import (
    ResumePlan,
    find_chapter_index,
    order_chapters,
    plan_resume,
    remaining_count,
)
from .workspace import list_materialized_chapter_keys, title_dir

UNKNOWN_TITLE = "unknown_comic"
RECENT_SHOWN = 10


@dataclass
class TitleInventory:
    url: str
    title: str
    workspace: str
    chapters: List[ChapterRef] = field(default_factory=list)
    plan: ResumePlan = field(default_factory=lambda: ResumePlan(total=0))

    @property
    def keys(self) -> List[str]:
        return [c.key for c in self.chapters]

    def describe(self) -> List[str]:
        """Human-readable summary of what is stored vs. what is available."""
        plan = self.plan
        lines = [f"Found {len(self.chapters)} chapters in total"]
        if plan.last_key is None:
            lines.append("No chapters downloaded yet")
            if self.chapters:
                lines.append(f"First chapter: Chapter {self.chapters[0].key}")
                lines.append(f"Last chapter: Chapter {self.chapters[-1].key}")
            return lines

        lines.append(f"Downloaded chapters ({len(plan.materialized)}):")
        for key in plan.materialized[-RECENT_SHOWN:]:
            lines.append(f"   - Chapter {key} [x]")
        if len(plan.materialized) > RECENT_SHOWN:
            lines.append(
                f"   - ... and {len(plan.materialized) - RECENT_SHOWN} more"
            )
        lines.append(f"Last downloaded: Chapter {plan.last_key}")
        if plan.next_index is not None:
            lines.append(
                f"Next available: Chapter {self.chapters[plan.next_index].key}"
            )
        else:
            lines.append("All chapters are downloaded!")
        return lines


def resolve_title_choice(choice: str, history: HistoryLedger) -> str:
    """A history number (1-based) or a new https:// URL."""
    choice = (choice or "").strip()
    if not choice:
        raise InvalidSelection("No input given.")
    if choice.isdigit():
        url = history.entry_at(int(choice))
        if not url:
            raise InvalidSelection("Invalid history index.")
        choice = url
    if not choice.startswith("https://"):
        raise InvalidSelection("Invalid comic URL.")
    return choice


def parse_count(text: Optional[str], default: int) -> int:
    if text is None or not str(text).strip():
        return default
    try:
        count = int(str(text).strip())
    except ValueError:
        raise InvalidSelection("Invalid number of chapters.") from None
    if count < 1:
        raise InvalidSelection("Invalid number of chapters.")
    return count


class Orchestrator:
    def __init__(
        self,
        config: DownloaderConfig,
        source,
        engine: ChapterEngine,
        history: HistoryLedger,
    ):
        self.config = config
        self.source = source
        self.engine = engine
        self.history = history

    # --- Title --------------------------------------------------------------
    def open_title(self, url: str) -> TitleInventory:
        title = self.source.resolve_title_display_name(url)
        if title:
            self.history.record_access(url, title)
        else:
            title = UNKNOWN_TITLE
        print(f"Fetching chapters for: {title}")

        chapters = order_chapters(self.source.list_chapters(url))
        workspace = title_dir(self.config.output_dir, title)
        materialized = list_materialized_chapter_keys(workspace)
        return TitleInventory(
            url=url,
            title=title,
            workspace=workspace,
            chapters=chapters,
            plan=plan_resume(chapters, materialized),
        )

    # --- Start position -----------------------------------------------------
    def resolve_start(
        self,
        inventory: TitleInventory,
        start: Optional[str] = None,
        resume: bool = False,
    ) -> int:
        if resume:
            plan = inventory.plan
            if plan.last_key is None:
                raise InvalidSelection("Nothing downloaded yet; choose a chapter.")
            if plan.next_index is None:
                raise InvalidSelection("No next chapter to download.")
            return plan.next_index
        if start is None:
            raise InvalidSelection("No chapter given.")
        index = find_chapter_index(inventory.chapters, start)
        if index is None:
            raise InvalidSelection("Chapter not found.")
        return index

    # --- Download -----------------------------------------------------------
    def run_chapters(
        self, inventory: TitleInventory, start_index: int, count: int
    ) -> List[ChapterReport]:
        chapters = inventory.chapters
        end = min(start_index + count, len(chapters))
        print(
            f"\nDownloading {end - start_index} chapters starting from "
            f"Chapter {chapters[start_index].key}..."
        )
        reports = []
        for ref in chapters[start_index:end]:
            try:
                reports.append(self.engine.process_chapter(ref, inventory.title))
            except Exception as e:
                log_error(f"  Error processing Chapter {ref.key}: {e}")
        processed = sum(1 for r in reports if r.outcome is ChapterOutcome.PROCESSED)
        incomplete = [
            r.key
            for r in reports
            if r.outcome is ChapterOutcome.PROCESSED and not r.complete
        ]
        log_verbose(f"  {processed} chapter(s) processed, {len(reports) - processed} skipped")
        if incomplete:
            print(
                "  Incomplete chapters (will be retried next run): "
                + ", ".join(incomplete)
            )
        print("\nAll downloads finished!")
        return reports

    def run(
        self,
        url: str,
        start: Optional[str] = None,
        resume: bool = False,
        count: Optional[int] = None,
        ask: Optional[Callable[[str], str]] = None,
    ) -> List[ChapterReport]:
        """
        Full pass over one title: inventory, start position, chapter count,
        then each chapter in ascending order. Missing choices are asked
        through ``ask`` when given; without it the run starts at the resume
        point (the first chapter when nothing is stored yet).
        """
        inventory = self.open_title(url)
        if not inventory.chapters:
            print(f"No chapters found for {url}")
            return []
        for line in inventory.describe():
            print(line)

        if start is None and not resume:
            if ask is not None:
                start, resume = self._ask_start(inventory, ask)
            elif inventory.plan.next_index is None:
                raise InvalidSelection("No next chapter to download.")
            else:
                start_index = inventory.plan.next_index
        if start is not None or resume:
            start_index = self.resolve_start(inventory, start=start, resume=resume)

        default_count = remaining_count(len(inventory.chapters), start_index)
        if count is None and ask is not None:
            count = parse_count(
                ask(f"How many chapters to download? (default: {default_count}): "),
                default_count,
            )
        elif count is None:
            count = default_count
        elif count < 1:
            raise InvalidSelection("Invalid number of chapters.")
        return self.run_chapters(inventory, start_index, count)

    def _ask_start(self, inventory: TitleInventory, ask):
        plan = inventory.plan
        print("\nDownload options:")
        print("1. Download from a specific chapter")
        if plan.last_key and plan.next_index is not None:
            print(
                f"2. Continue from Chapter {inventory.chapters[plan.next_index].key} "
                f"(after Chapter {plan.last_key})"
            )
        elif plan.last_key:
            print("2. [Unavailable] All chapters are downloaded")
        else:
            print("2. [Unavailable] No chapters downloaded yet")

        option = (ask("\nChoose an option (1/2): ") or "").strip()
        if option == "2":
            return None, True
        if not option:
            raise InvalidSelection("No option selected.")
        chapter = (ask("\nEnter the chapter (e.g., 35.1 or 35-1): ") or "").strip()
        if not chapter:
            raise InvalidSelection("No chapter given.")
        return chapter, False


__all__ = [
    "Orchestrator",
    "TitleInventory",
    "parse_count",
    "resolve_title_choice",
]
