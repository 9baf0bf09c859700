"""Application entry point and setup for the Typing Classic trainer."""

import argparse
import logging
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication

from typeclassic.core.books import BookLoader, load_config
from typeclassic.core.passages import Difficulty
from typeclassic.core.processor import prepare_library
from typeclassic.core.progress import PersonalBestStore
from typeclassic.core.remote import RemotePassageService
from typeclassic.core.selector import PassageSelector
from typeclassic.core.store import JsonPassageRepository
from typeclassic.ui.main_window import MainWindow


def configure_logging(verbose: bool = False) -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="typeclassic", description="Typing practice on classic books.")
    parser.add_argument("--config", type=Path, default=None, help="path to a books.yaml catalog")
    parser.add_argument("--reprocess", action="store_true", help="rebuild passages even if they are cached")
    parser.add_argument("--verbose", action="store_true", help="log rejected candidates and other details")
    parser.add_argument(
        "--preview",
        type=int,
        metavar="N",
        default=None,
        help="print N stored passages per difficulty and exit",
    )
    return parser.parse_args(argv)


def print_preview(selector: PassageSelector, count: int) -> None:
    """Print tier statistics and the first ``count`` passages of each tier."""
    for difficulty in Difficulty:
        stats = selector.stats(difficulty)
        print(
            f"{difficulty.value}: {stats.total} passages, "
            f"avg grade {stats.avg_grade}, avg length {stats.avg_length}"
        )
        for item in selector.preview(difficulty, count):
            flag = "" if item.meaningful else " (fragment)"
            print(f"  [{item.id}] grade {item.grade}, {item.word_count} words{flag}: {item.preview}")


def run() -> None:
    """Load configuration, build passages if needed, and start the main window."""
    args = parse_args(sys.argv[1:])
    configure_logging(args.verbose)

    config = load_config(args.config)
    repository = JsonPassageRepository()
    prepare_library(
        config.books,
        BookLoader(),
        repository,
        cache_validity_days=config.cache_validity_days,
        max_passages=config.max_passages,
        force=args.reprocess,
    )

    selector = PassageSelector(repository)
    if args.preview is not None:
        print_preview(selector, args.preview)
        return

    remote = RemotePassageService(config.remote_url, selector=selector)

    app = QApplication(sys.argv[:1])
    app.setApplicationName("Typing Classic")
    app.setApplicationDisplayName("Typing Classic")

    window = MainWindow(selector=selector, personal_bests=PersonalBestStore(), remote=remote)
    window.show()

    sys.exit(app.exec())
