from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QCloseEvent, QKeyEvent, QKeySequence
from PySide6.QtWidgets import (
    QComboBox,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from typeclassic.core.errors import RepositoryError
from typeclassic.core.passages import Difficulty, Passage
from typeclassic.core.progress import PersonalBestStore
from typeclassic.core.remote import RemotePassageService
from typeclassic.core.selector import PassageSelector
from typeclassic.core.session import FinalMetrics, LiveMetrics, SessionEvent, TypingEngine
from typeclassic.ui.colors import PracticeColors, accuracy_color
from typeclassic.ui.highlight import render_passage_html
from typeclassic.ui.timers import QtTicker

logger = logging.getLogger(__name__)


class TypingInput(QLineEdit):
    """Input line that refuses pasted text."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setContextMenuPolicy(Qt.NoContextMenu)

    def keyPressEvent(self, event: QKeyEvent) -> None:
        if event.matches(QKeySequence.Paste):
            event.ignore()
            return
        super().keyPressEvent(event)


class MainWindow(QMainWindow):
    """Practice window: pick a tier, type the passage, see live and final metrics."""

    def __init__(
        self,
        selector: PassageSelector,
        personal_bests: PersonalBestStore,
        remote: Optional[RemotePassageService] = None,
    ) -> None:
        super().__init__()
        self._selector = selector
        self._personal_bests = personal_bests
        self._remote = remote
        self._difficulty: Optional[Difficulty] = None
        self._passage: Optional[Passage] = None
        self._from_store = False

        self._engine = TypingEngine(ticker=QtTicker(self))
        self._engine.subscribe(SessionEvent.STARTED, self._on_started)
        self._engine.subscribe(SessionEvent.TICK, self._on_tick)
        self._engine.subscribe(SessionEvent.COMPLETED, self._on_completed)

        self.setWindowTitle("Typing Classic")
        self._build_ui()
        self._update_buttons(has_passage=False, started=False)

    def _build_ui(self) -> None:
        central = QWidget(self)
        central.setStyleSheet(f"background:{PracticeColors.BG}; color:{PracticeColors.TEXT_PRIMARY};")
        layout = QVBoxLayout(central)
        layout.setContentsMargins(32, 24, 32, 24)
        layout.setSpacing(16)

        top = QHBoxLayout()
        top.addWidget(QLabel("Difficulty:"))
        self.difficulty_picker = QComboBox()
        self.difficulty_picker.addItem("Choose a level", None)
        for difficulty in Difficulty:
            self.difficulty_picker.addItem(difficulty.value.title(), difficulty)
        self.difficulty_picker.currentIndexChanged.connect(self._on_difficulty_changed)
        top.addWidget(self.difficulty_picker)
        top.addStretch(1)
        self.best_label = QLabel("")
        top.addWidget(self.best_label)
        layout.addLayout(top)

        card = QFrame()
        card.setStyleSheet(
            f"QFrame {{ background:{PracticeColors.CARD_BG}; border:1px solid {PracticeColors.CARD_BORDER};"
            " border-radius:12px; }"
        )
        card_layout = QVBoxLayout(card)
        self.passage_display = QLabel("Pick a difficulty to get a passage.")
        self.passage_display.setWordWrap(True)
        self.passage_display.setTextFormat(Qt.RichText)
        self.passage_display.setStyleSheet("font-size:20px; border:none; padding:12px;")
        card_layout.addWidget(self.passage_display)
        layout.addWidget(card, 1)

        self.input_box = TypingInput()
        self.input_box.setStyleSheet("font-size:18px; padding:8px;")
        self.input_box.textEdited.connect(self._on_input)
        layout.addWidget(self.input_box)

        stats = QHBoxLayout()
        self.wpm_label = QLabel()
        self.accuracy_label = QLabel()
        self.errors_label = QLabel()
        self.time_label = QLabel()
        for label in (self.wpm_label, self.accuracy_label, self.errors_label, self.time_label):
            label.setStyleSheet("font-size:16px; font-weight:600;")
            stats.addWidget(label)
        layout.addLayout(stats)
        self._reset_stats()

        buttons = QHBoxLayout()
        buttons.addStretch(1)
        self.try_again_button = QPushButton("Try again")
        self.try_again_button.clicked.connect(self._on_try_again)
        self.new_passage_button = QPushButton("New passage")
        self.new_passage_button.clicked.connect(self._on_new_passage)
        buttons.addWidget(self.try_again_button)
        buttons.addWidget(self.new_passage_button)
        layout.addLayout(buttons)

        self.setCentralWidget(central)
        self.resize(900, 560)

    def _on_difficulty_changed(self, index: int) -> None:
        difficulty = self.difficulty_picker.itemData(index)
        if difficulty is None:
            return
        logger.info("Selected difficulty: %s", difficulty.value)
        self._difficulty = difficulty
        self._passage = None
        self._show_personal_best()
        self._load_new_passage()

    def _on_new_passage(self) -> None:
        if self._difficulty is None:
            return
        self._load_new_passage()

    def _on_try_again(self) -> None:
        if self._difficulty is None or self._passage is None:
            return
        passage: Optional[Passage] = self._passage
        if self._from_store:
            # The stored set may have been rebuilt since this passage was served.
            try:
                passage = self._selector.get_by_id(self._difficulty, self._passage.id)
            except RepositoryError as e:
                logger.error("Failed to reload passage: %s", e)
        self._start_passage(passage or self._passage, from_store=self._from_store)

    def _load_new_passage(self) -> None:
        assert self._difficulty is not None
        passage: Optional[Passage] = None
        try:
            passage = self._selector.get_random(self._difficulty)
        except RepositoryError as e:
            logger.error("Failed to load passage: %s", e)
        from_store = passage is not None
        if passage is None and self._remote is not None:
            passage = self._remote.get_passage(self._difficulty)
        if passage is None:
            self._engine.reset()
            self._passage = None
            self.passage_display.setText("No passages available for this level yet. Please try again later.")
            self._update_buttons(has_passage=False, started=False)
            return
        self._start_passage(passage, from_store=from_store)

    def _start_passage(self, passage: Passage, from_store: bool) -> None:
        self._passage = passage
        self._from_store = from_store
        self._engine.set_target_text(passage.text)
        self.input_box.clear()
        self.input_box.setMaxLength(len(passage.text))
        self.input_box.setReadOnly(False)
        self._reset_stats()
        self._render()
        self._update_buttons(has_passage=True, started=False)
        self.input_box.setFocus()

    def _on_input(self, text: str) -> None:
        if self._passage is None:
            return
        metrics = self._engine.process_input(text)
        if isinstance(metrics, LiveMetrics):
            self._show_metrics(metrics)
        self._render()

    def _on_started(self) -> None:
        logger.info("Typing test started")
        self._update_buttons(has_passage=True, started=True)

    def _on_tick(self, metrics: LiveMetrics) -> None:
        self._show_metrics(metrics)

    def _on_completed(self, metrics: FinalMetrics) -> None:
        logger.info("Typing test completed: %s", metrics)
        self.input_box.setReadOnly(True)
        self._show_metrics(metrics)
        self._update_buttons(has_passage=True, started=False)

        new_best = False
        if self._difficulty is not None:
            new_best = self._personal_bests.record(self._difficulty, metrics)
            self._show_personal_best()

        summary = (
            f"Net WPM: {metrics.net_wpm}\n"
            f"Gross WPM: {metrics.gross_wpm}\n"
            f"Accuracy: {metrics.accuracy}%\n"
            f"Errors: {metrics.errors}\n"
            f"Time: {TypingEngine.format_time(metrics.time_elapsed)}"
        )
        if new_best:
            summary += "\n\nNew personal best!"
        QMessageBox.information(self, "Passage complete", summary)

    def _render(self) -> None:
        self.passage_display.setText(render_passage_html(self._engine.character_analysis()))

    def _show_metrics(self, metrics) -> None:
        self.wpm_label.setText(f"WPM: {metrics.net_wpm}")
        self.accuracy_label.setText(f"Accuracy: {metrics.accuracy}%")
        self.accuracy_label.setStyleSheet(
            f"font-size:16px; font-weight:600; color:{accuracy_color(float(metrics.accuracy))};"
        )
        self.errors_label.setText(f"Errors: {metrics.errors}")
        self.time_label.setText(f"Time: {TypingEngine.format_time(metrics.time_elapsed)}")

    def _reset_stats(self) -> None:
        self.wpm_label.setText("WPM: 0")
        self.accuracy_label.setText("Accuracy: 0%")
        self.accuracy_label.setStyleSheet("font-size:16px; font-weight:600;")
        self.errors_label.setText("Errors: 0")
        self.time_label.setText("Time: 00:00")

    def _show_personal_best(self) -> None:
        best = self._personal_bests.get(self._difficulty) if self._difficulty else None
        self.best_label.setText(f"Best: {best.net_wpm} WPM" if best else "")

    def _update_buttons(self, has_passage: bool, started: bool) -> None:
        self.new_passage_button.setEnabled(self._difficulty is not None)
        self.try_again_button.setEnabled(has_passage and not started)
        self.input_box.setEnabled(has_passage)

    def closeEvent(self, event: QCloseEvent) -> None:
        self._engine.reset()
        super().closeEvent(event)
