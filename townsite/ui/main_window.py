"""Main application window for the settlement website editor."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from PyQt6 import QtCore, QtGui, QtWidgets
from PyQt6.QtWebEngineWidgets import QWebEngineView

from ..config import AppConfig, save_config
from ..core import generator
from ..core.api import ApiClient
from ..core.cache import DraftCache
from ..core.errors import TownsiteError
from ..core.models import ALIGNMENTS, COMPONENT_LABELS, COMPONENT_TYPES, WebsiteComponent, content_fields
from ..core.preview import PREVIEW_WIDTHS
from ..core.publish import N8nWebhookClient, Publisher
from ..core.session import EditorSession
from ..core.storage import JsonFileStore
from ..core.tree import TreeChange

logger = logging.getLogger(__name__)

APP_TITLE = "Townsite"

ALIGNMENT_LABELS = {"left": "Stânga", "center": "Centru", "right": "Dreapta"}
FIELD_LABELS = {"title": "Titlu", "subtitle": "Subtitlu", "description": "Descriere"}
CODE_FILES = ("index.html", "styles.css", "script.js", "blog.html", "post.html")
PUBLISH_LABEL = "Salvează și publică"
PUBLISHING_LABEL = "Se salvează..."


def _item_label(component: WebsiteComponent) -> str:
    label = COMPONENT_LABELS[component.type]
    title = getattr(component.content, "title", None)
    return f"{label}: {title}" if title else label


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, config: AppConfig) -> None:
        super().__init__()
        self.setWindowTitle(APP_TITLE)
        self.resize(1320, 820)

        self.config = config
        self.api = ApiClient(config.api_url, config.token)
        self.cache = DraftCache(JsonFileStore(config.drafts_path))
        self.options = generator.GeneratorOptions(api_url=config.site_api_url)
        self.publisher = Publisher(
            N8nWebhookClient(
                config.n8n_create_url,
                config.n8n_update_url,
                config.n8n_update_method,
            ),
            self.options,
        )
        self.session: Optional[EditorSession] = None
        self._preview_mode = "desktop"
        self._loading_form = False
        self._form_component_id: Optional[str] = None

        self._debounce = QtCore.QTimer(self)
        self._debounce.setInterval(400)
        self._debounce.setSingleShot(True)
        self._debounce.timeout.connect(self._flush_editors)

        self._build_ui()
        self._build_menu()
        self._bind_events()
        self._update_controls()

    # ------------------------------------------------------------------ UI --
    def _build_ui(self) -> None:
        splitter = QtWidgets.QSplitter(self)
        splitter.setOrientation(QtCore.Qt.Orientation.Horizontal)
        self.setCentralWidget(splitter)

        # Components panel
        left_panel = QtWidgets.QWidget(self)
        left_layout = QtWidgets.QVBoxLayout(left_panel)
        left_layout.setContentsMargins(6, 6, 6, 6)
        left_layout.setSpacing(6)

        self.settlement_label = QtWidgets.QLabel("Nicio localitate deschisă", left_panel)
        self.settlement_label.setWordWrap(True)
        self.btn_create = QtWidgets.QPushButton("Creează website", left_panel)

        self.components_list = QtWidgets.QListWidget(left_panel)
        self.components_list.setSelectionMode(QtWidgets.QAbstractItemView.SelectionMode.SingleSelection)

        add_row = QtWidgets.QHBoxLayout()
        self.type_combo = QtWidgets.QComboBox(left_panel)
        for component_type in COMPONENT_TYPES:
            self.type_combo.addItem(COMPONENT_LABELS[component_type], component_type)
        self.btn_add = QtWidgets.QPushButton("Adaugă", left_panel)
        add_row.addWidget(self.type_combo, 1)
        add_row.addWidget(self.btn_add)

        move_row = QtWidgets.QHBoxLayout()
        self.btn_up = QtWidgets.QPushButton("Sus", left_panel)
        self.btn_down = QtWidgets.QPushButton("Jos", left_panel)
        self.btn_delete = QtWidgets.QPushButton("Șterge", left_panel)
        move_row.addWidget(self.btn_up)
        move_row.addWidget(self.btn_down)
        move_row.addWidget(self.btn_delete)

        align_row = QtWidgets.QHBoxLayout()
        self.align_combo = QtWidgets.QComboBox(left_panel)
        for alignment in ALIGNMENTS:
            self.align_combo.addItem(ALIGNMENT_LABELS[alignment], alignment)
        align_row.addWidget(QtWidgets.QLabel("Aliniere", left_panel))
        align_row.addWidget(self.align_combo, 1)

        self.btn_publish = QtWidgets.QPushButton(PUBLISH_LABEL, left_panel)

        left_layout.addWidget(self.settlement_label)
        left_layout.addWidget(self.btn_create)
        left_layout.addWidget(QtWidgets.QLabel("Componente", left_panel))
        left_layout.addWidget(self.components_list, 1)
        left_layout.addLayout(add_row)
        left_layout.addLayout(move_row)
        left_layout.addLayout(align_row)
        left_layout.addWidget(self.btn_publish)

        # Editors + generated code tabs
        self.mid_tabs = QtWidgets.QTabWidget(self)
        self.mid_tabs.setDocumentMode(True)

        content_page = QtWidgets.QWidget(self.mid_tabs)
        form = QtWidgets.QFormLayout(content_page)
        self.field_editors: Dict[str, QtWidgets.QWidget] = {
            "title": QtWidgets.QLineEdit(content_page),
            "subtitle": QtWidgets.QLineEdit(content_page),
            "description": QtWidgets.QPlainTextEdit(content_page),
        }
        for name, editor in self.field_editors.items():
            form.addRow(FIELD_LABELS[name], editor)

        self.css_editor = QtWidgets.QPlainTextEdit(self.mid_tabs)
        self.css_editor.setPlaceholderText("/* CSS personalizat, adăugat după stilurile de bază */")

        self.code_tabs = QtWidgets.QTabWidget(self.mid_tabs)
        self.code_views: Dict[str, QtWidgets.QPlainTextEdit] = {}
        for filename in CODE_FILES:
            view = QtWidgets.QPlainTextEdit(self.code_tabs)
            view.setReadOnly(True)
            view.setLineWrapMode(QtWidgets.QPlainTextEdit.LineWrapMode.NoWrap)
            self.code_views[filename] = view
            self.code_tabs.addTab(view, filename)

        self.mid_tabs.addTab(content_page, "Conținut")
        self.mid_tabs.addTab(self.css_editor, "CSS personalizat")
        self.mid_tabs.addTab(self.code_tabs, "Cod generat")

        # Preview
        right_panel = QtWidgets.QWidget(self)
        right_layout = QtWidgets.QVBoxLayout(right_panel)
        right_layout.setContentsMargins(6, 6, 6, 6)
        right_layout.setSpacing(6)

        mode_row = QtWidgets.QHBoxLayout()
        self.mode_group = QtWidgets.QButtonGroup(right_panel)
        self.mode_buttons: Dict[str, QtWidgets.QPushButton] = {}
        for mode, label in (("desktop", "Desktop"), ("tablet", "Tabletă"), ("mobile", "Mobil")):
            button = QtWidgets.QPushButton(label, right_panel)
            button.setCheckable(True)
            self.mode_group.addButton(button)
            self.mode_buttons[mode] = button
            mode_row.addWidget(button)
        self.mode_buttons["desktop"].setChecked(True)
        self.btn_blog_preview = QtWidgets.QPushButton("Pagina de noutăți", right_panel)
        self.btn_blog_preview.setCheckable(True)
        self.blog_search = QtWidgets.QLineEdit(right_panel)
        self.blog_search.setPlaceholderText("Caută în postări...")
        self.blog_search.setVisible(False)
        mode_row.addStretch(1)
        mode_row.addWidget(self.btn_blog_preview)

        self.preview = QWebEngineView(right_panel)
        right_layout.addWidget(QtWidgets.QLabel("Preview", right_panel))
        right_layout.addLayout(mode_row)
        right_layout.addWidget(self.blog_search)
        right_layout.addWidget(self.preview, 1)

        splitter.addWidget(left_panel)
        splitter.addWidget(self.mid_tabs)
        splitter.addWidget(right_panel)
        splitter.setSizes([260, 480, 580])

        self.status = self.statusBar()

    def _build_menu(self) -> None:
        bar = self.menuBar()
        if bar is None:
            bar = QtWidgets.QMenuBar(self)
            self.setMenuBar(bar)

        file_menu = bar.addMenu("&File")
        self.act_open = QtGui.QAction("Deschide localitate…", self)
        self.act_reload_posts = QtGui.QAction("Reîncarcă postările", self)
        self.act_export = QtGui.QAction("Export Site…", self)
        self.act_reset = QtGui.QAction("Resetează ciorna", self)
        self.act_quit = QtGui.QAction("Quit", self)

        if file_menu is not None:
            file_menu.addActions([self.act_open, self.act_reload_posts])
            file_menu.addSeparator()
            file_menu.addActions([self.act_export, self.act_reset])
            file_menu.addSeparator()
            file_menu.addAction(self.act_quit)

        help_menu = bar.addMenu("&Help")
        self.act_about = QtGui.QAction("About", self)
        if help_menu is not None:
            help_menu.addAction(self.act_about)

    def _bind_events(self) -> None:
        self.btn_create.clicked.connect(self.create_website)
        self.btn_add.clicked.connect(self.add_component)
        self.btn_delete.clicked.connect(self.delete_component)
        self.btn_up.clicked.connect(lambda: self.move_component("up"))
        self.btn_down.clicked.connect(lambda: self.move_component("down"))
        self.align_combo.activated.connect(self._on_alignment_chosen)
        self.btn_publish.clicked.connect(self.publish)
        self.components_list.currentRowChanged.connect(self._on_component_selection_changed)

        for editor in self.field_editors.values():
            editor.textChanged.connect(self._on_editor_changed)
        self.css_editor.textChanged.connect(self._on_editor_changed)
        self.mid_tabs.currentChanged.connect(lambda _index: self.refresh_code_view())

        for mode, button in self.mode_buttons.items():
            button.clicked.connect(lambda _checked, m=mode: self.set_preview_mode(m))
        self.btn_blog_preview.toggled.connect(self._on_blog_preview_toggled)
        self.blog_search.textChanged.connect(lambda _text: self.update_preview())

        self.act_open.triggered.connect(self.open_settlement_dialog)
        self.act_reload_posts.triggered.connect(self.reload_posts)
        self.act_export.triggered.connect(self.export_site)
        self.act_reset.triggered.connect(self.reset_draft)
        self.act_quit.triggered.connect(self.close)
        self.act_about.triggered.connect(self.show_about)

    # -------------------------------------------------------- Settlement Ops --
    def open_settlement_dialog(self) -> None:
        settlement_id, ok = QtWidgets.QInputDialog.getText(
            self, "Deschide localitate", "ID localitate:", text=self.config.last_settlement_id or ""
        )
        if ok and settlement_id.strip():
            self.open_settlement(settlement_id.strip())

    def open_settlement(self, settlement_id: str) -> bool:
        self._flush_editors()
        try:
            settlement = self.api.get_settlement(settlement_id)
            posts = self.api.get_blog_posts(settlement_id)
        except TownsiteError as exc:
            logger.error("Could not open settlement %s: %s", settlement_id, exc)
            QtWidgets.QMessageBox.warning(self, "Eroare", f"Localitatea nu a putut fi încărcată:\n{exc}")
            return False

        self.session = EditorSession(settlement, posts, self.cache)
        restored = self.session.open()
        self.config.last_settlement_id = settlement_id
        try:
            save_config(self.config)
        except OSError as exc:
            logger.warning("Could not save settings: %s", exc)

        self._load_css_into_editor()
        self._refresh_components_list(select_index=0)
        self.update_window_title()
        self._update_controls()
        self.update_preview()
        if self.status is not None:
            message = "Ciornă restaurată" if restored else f"Deschis {settlement.name}"
            self.status.showMessage(message, 4000)
        return True

    def reload_posts(self) -> None:
        if self.session is None:
            return
        try:
            self.session.set_posts(self.api.get_blog_posts(self.session.settlement.id))
        except TownsiteError as exc:
            QtWidgets.QMessageBox.warning(self, "Eroare", f"Postările nu au putut fi încărcate:\n{exc}")
            return
        self.update_preview()
        if self.status is not None:
            self.status.showMessage(f"{len(self.session.posts)} postări încărcate", 3000)

    def export_site(self) -> None:
        if self.session is None:
            return
        self._flush_editors()
        out_dir = QtWidgets.QFileDialog.getExistingDirectory(self, "Export Site")
        if not out_dir:
            return
        try:
            generator.export_site(self.session.bundle(self.options), out_dir)
        except OSError as exc:
            QtWidgets.QMessageBox.warning(self, "Export", f"Exportul a eșuat:\n{exc}")
            return
        if self.status is not None:
            self.status.showMessage(f"Exported site to {out_dir}", 5000)
        QtWidgets.QMessageBox.information(self, "Export complete", f"Your site was exported to:\n{out_dir}")

    def reset_draft(self) -> None:
        if self.session is None:
            return
        answer = QtWidgets.QMessageBox.question(
            self,
            "Resetează ciorna",
            "Ștergi toate componentele și CSS-ul nesalvat?",
        )
        if answer != QtWidgets.QMessageBox.StandardButton.Yes:
            return
        self._debounce.stop()
        self.session.reset()
        self._load_css_into_editor()
        self._refresh_components_list()
        self._update_controls()
        self.update_preview()

    def publish(self) -> None:
        if self.session is None:
            return
        self._flush_editors()
        self.btn_publish.setEnabled(False)
        self.btn_publish.setText(PUBLISHING_LABEL)
        QtWidgets.QApplication.processEvents()
        try:
            result = self.session.publish(self.publisher)
        except TownsiteError as exc:
            details = getattr(exc, "details", None)
            message = str(exc) if not details else f"{exc}\n\n{details}"
            QtWidgets.QMessageBox.warning(self, "Publicare eșuată", message)
            return
        finally:
            self.btn_publish.setText(PUBLISH_LABEL)
            self._update_controls()

        text = "Website creat cu succes!" if result.action == "create" else "Website actualizat cu succes!"
        if self.status is not None:
            self.status.showMessage(text, 5000)
        QtWidgets.QMessageBox.information(self, "Publicare", text)

    # ---------------------------------------------------------- Component Ops --
    def create_website(self) -> None:
        if self.session is None:
            return
        self._apply(self.session.create_website(), select_index=0)

    def add_component(self) -> None:
        if self.session is None:
            return
        change = self.session.add(self.type_combo.currentData())
        select = None
        if change.accepted and change.component is not None:
            select = change.component.position
        self._apply(change, select_index=select)

    def delete_component(self) -> None:
        component_id = self._current_component_id()
        if self.session is None or component_id is None:
            return
        row = self.components_list.currentRow()
        self._apply(self.session.delete(component_id), select_index=max(0, row - 1))

    def move_component(self, direction: str) -> None:
        component_id = self._current_component_id()
        if self.session is None or component_id is None:
            return
        change = self.session.move(component_id, direction)
        select = change.component.position if change.component is not None else None
        self._apply(change, select_index=select)

    def _on_alignment_chosen(self, _index: int) -> None:
        component_id = self._current_component_id()
        if self.session is None or component_id is None:
            return
        self._apply(self.session.align(component_id, self.align_combo.currentData()))

    def _apply(self, change: TreeChange, select_index: Optional[int] = None) -> None:
        if change.warning:
            QtWidgets.QMessageBox.warning(self, "Atenție", change.warning)
        if not change.accepted:
            return
        row = self.components_list.currentRow() if select_index is None else select_index
        self._refresh_components_list(select_index=row)
        self._update_controls()
        self.update_preview()

    # ------------------------------------------------------------- Editors --
    def _refresh_components_list(self, select_index: int = 0) -> None:
        self.components_list.blockSignals(True)
        self.components_list.clear()
        components = self.session.components if self.session is not None else []
        for comp in components:
            item = QtWidgets.QListWidgetItem(_item_label(comp))
            item.setData(QtCore.Qt.ItemDataRole.UserRole, comp.id)
            self.components_list.addItem(item)
        self.components_list.blockSignals(False)
        if components:
            self.components_list.setCurrentRow(min(max(select_index, 0), len(components) - 1))
        self._load_component_into_form()

    def _current_component_id(self) -> Optional[str]:
        item = self.components_list.currentItem()
        if item is None:
            return None
        return item.data(QtCore.Qt.ItemDataRole.UserRole)

    def _on_component_selection_changed(self, _row: int) -> None:
        self._flush_editors()
        self._load_component_into_form()

    def _load_component_into_form(self) -> None:
        component_id = self._current_component_id()
        component = self.session.tree.get(component_id) if self.session and component_id else None
        allowed = content_fields(component.type) if component is not None else ()

        self._form_component_id = component.id if component is not None else None
        self._loading_form = True
        for name, editor in self.field_editors.items():
            value = getattr(component.content, name, None) if component is not None else None
            editor.setEnabled(name in allowed)
            if isinstance(editor, QtWidgets.QLineEdit):
                editor.setText(value or "")
            elif isinstance(editor, QtWidgets.QPlainTextEdit):
                editor.setPlainText(value or "")
        if component is not None:
            self.align_combo.setCurrentIndex(ALIGNMENTS.index(component.alignment))
        self._loading_form = False
        self._update_controls()

    def _load_css_into_editor(self) -> None:
        self._loading_form = True
        self.css_editor.setPlainText(self.session.css if self.session is not None else "")
        self._loading_form = False

    def _on_editor_changed(self) -> None:
        if not self._loading_form:
            self._debounce.start()

    def _form_patch(self, allowed: List[str], current) -> Dict[str, Optional[str]]:
        patch: Dict[str, Optional[str]] = {}
        for name in allowed:
            editor = self.field_editors[name]
            if isinstance(editor, QtWidgets.QLineEdit):
                value = editor.text()
            elif isinstance(editor, QtWidgets.QPlainTextEdit):
                value = editor.toPlainText()
            else:
                continue
            if value != (getattr(current, name, None) or ""):
                patch[name] = value
        return patch

    def _flush_editors(self) -> None:
        self._debounce.stop()
        if self.session is None:
            return
        changed = False
        component_id = self._form_component_id
        component = self.session.tree.get(component_id) if component_id else None
        if component is not None:
            patch = self._form_patch(list(content_fields(component.type)), component.content)
            if patch and self.session.edit(component.id, patch).accepted:
                changed = True
                self._relabel_item(component.id)
        css = self.css_editor.toPlainText()
        if css != self.session.css:
            self.session.set_css(css)
            changed = True
        if changed:
            self.update_preview()

    def _relabel_item(self, component_id: str) -> None:
        component = self.session.tree.get(component_id) if self.session else None
        if component is None:
            return
        for row in range(self.components_list.count()):
            item = self.components_list.item(row)
            if item is not None and item.data(QtCore.Qt.ItemDataRole.UserRole) == component_id:
                item.setText(_item_label(component))
                return

    # ------------------------------------------------------------- Preview --
    def set_preview_mode(self, mode: str) -> None:
        if mode not in PREVIEW_WIDTHS:
            return
        self._preview_mode = mode
        self.update_preview()

    def _on_blog_preview_toggled(self, checked: bool) -> None:
        self.blog_search.setVisible(checked)
        self.update_preview()

    def update_preview(self) -> None:
        if self.session is None:
            self.preview.setHtml("")
            return
        if self.btn_blog_preview.isChecked():
            html = self.session.blog_preview(self.blog_search.text())
        else:
            html = self.session.preview(self._preview_mode)
        self.preview.setHtml(html, QtCore.QUrl("about:blank"))
        self.refresh_code_view()

    def refresh_code_view(self) -> None:
        if self.session is None or self.mid_tabs.currentWidget() is not self.code_tabs:
            return
        files = self.session.bundle(self.options).files()
        for filename, view in self.code_views.items():
            view.setPlainText(files.get(filename, ""))

    # ---------------------------------------------------------------- Misc --
    def _update_controls(self) -> None:
        has_session = self.session is not None
        has_components = has_session and bool(self.session.tree)
        selected = self._current_component_id() is not None
        self.btn_create.setVisible(has_session and not has_components)
        for widget in (self.btn_add, self.type_combo):
            widget.setEnabled(has_session)
        for widget in (self.btn_up, self.btn_down, self.btn_delete, self.align_combo):
            widget.setEnabled(has_components and selected)
        self.btn_publish.setEnabled(has_components)
        self.act_export.setEnabled(has_components)
        self.act_reset.setEnabled(has_session)
        self.act_reload_posts.setEnabled(has_session)
        if self.session is not None:
            settlement = self.session.settlement
            state = "activ" if settlement.active else "inactiv"
            self.settlement_label.setText(f"{settlement.name} ({settlement.region}) - website {state}")

    def show_about(self) -> None:
        QtWidgets.QMessageBox.information(
            self,
            "About",
            f"{APP_TITLE}\nEditor pentru website-urile primăriilor.",
        )

    def update_window_title(self) -> None:
        if self.session is None:
            self.setWindowTitle(APP_TITLE)
            return
        self.setWindowTitle(f"{APP_TITLE} - {self.session.settlement.name}")

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # noqa: N802 (Qt override)
        self._flush_editors()
        super().closeEvent(event)
