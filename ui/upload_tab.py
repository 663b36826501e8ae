import logging

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import (
    QFileDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from renderer.core.errors import EditorError, InvalidInput, SaveFailure
from renderer.core.image_loader import decode_image, read_upload
from renderer.widgets.template_canvas import pil_to_qimage
from ui.error_window import describe_error
from ui.locales import ensure_language, get_section
from ui.workers import TaskRunner

logger = logging.getLogger(__name__)

PREVIEW_MAX_HEIGHT = 400


class DropArea(QFrame):
    fileDropped = Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setAcceptDrops(True)
        self.setFrameShape(QFrame.StyledPanel)
        self.setMinimumHeight(200)

    def dragEnterEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
        else:
            event.ignore()

    def dropEvent(self, event):
        for url in event.mimeData().urls():
            if url.isLocalFile():
                self.fileDropped.emit(url.toLocalFile())
                event.acceptProposedAction()
                return
        event.ignore()


class UploadTab(QWidget):
    templateUploaded = Signal(str)

    def __init__(self, store, cache, parent=None, error_notifier=None, language: str = "en"):
        super().__init__(parent)
        self.store = store
        self.cache = cache
        self.error_notifier = error_notifier
        self.language = ensure_language(language)
        self.strings: dict = {}
        self.error_strings: dict = {}
        self.tasks = TaskRunner(self)

        self.file_bytes: bytes | None = None
        self.data_url: str | None = None
        self.is_uploading = False

        self.build_ui()
        self.set_language(self.language)
        self._update_state()

    # ───────────────────────────────────────────────
    # UI
    # ───────────────────────────────────────────────
    def build_ui(self):
        layout = QVBoxLayout(self)

        self.drop_area = DropArea()
        self.drop_area.fileDropped.connect(self.process_file)
        drop_layout = QVBoxLayout(self.drop_area)
        drop_layout.addStretch(1)
        self.lbl_drop = QLabel()
        self.lbl_drop.setAlignment(Qt.AlignCenter)
        drop_layout.addWidget(self.lbl_drop)
        self.lbl_browse = QLabel()
        self.lbl_browse.setAlignment(Qt.AlignCenter)
        drop_layout.addWidget(self.lbl_browse)
        self.btn_choose = QPushButton()
        self.btn_choose.clicked.connect(self.choose_file)
        drop_layout.addWidget(self.btn_choose, alignment=Qt.AlignCenter)
        drop_layout.addStretch(1)
        layout.addWidget(self.drop_area)

        self.preview = QLabel()
        self.preview.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.preview)

        buttons = QHBoxLayout()
        self.btn_remove = QPushButton()
        self.btn_remove.clicked.connect(self.clear_image)
        buttons.addWidget(self.btn_remove)
        buttons.addStretch(1)
        self.btn_continue = QPushButton()
        self.btn_continue.clicked.connect(self.handle_upload)
        buttons.addWidget(self.btn_continue)
        layout.addLayout(buttons)
        layout.addStretch(1)

    def set_language(self, language: str):
        language = ensure_language(language)
        self.language = language
        self.strings = get_section(language, "upload_tab")
        self.error_strings = get_section(language, "errors")

        self.lbl_drop.setText(self.strings.get("drop_hint", "Drag and drop your image"))
        self.lbl_browse.setText(self.strings.get("browse_hint", ""))
        self.btn_choose.setText(self.strings.get("choose", "Choose Image"))
        self.btn_remove.setText(self.strings.get("remove", "Remove image"))
        self._update_state()

    def _update_state(self):
        has_file = self.file_bytes is not None
        self.drop_area.setVisible(not has_file)
        self.preview.setVisible(has_file)
        self.btn_remove.setVisible(has_file and not self.is_uploading)
        self.btn_continue.setVisible(has_file)
        self.btn_continue.setEnabled(not self.is_uploading)
        key, default = ("uploading", "Uploading...") if self.is_uploading else ("continue", "Continue to Editor")
        self.btn_continue.setText(self.strings.get(key, default))

    # ───────────────────────────────────────────────
    # File selection
    # ───────────────────────────────────────────────
    def choose_file(self):
        path, _ = QFileDialog.getOpenFileName(
            self,
            self.strings.get("select_file", "Choose template image"),
            "",
            self.strings.get("file_filter", "Images (*.png *.jpg *.jpeg *.webp *.bmp *.gif *.psd)"),
        )
        if path:
            self.process_file(path)

    def process_file(self, path: str):
        try:
            data, data_url = read_upload(path)
            preview = decode_image(data)
        except EditorError as exc:
            self._report(exc)
            return

        self.file_bytes = data
        self.data_url = data_url
        pixmap = QPixmap.fromImage(pil_to_qimage(preview))
        if pixmap.height() > PREVIEW_MAX_HEIGHT:
            pixmap = pixmap.scaledToHeight(PREVIEW_MAX_HEIGHT, Qt.SmoothTransformation)
        self.preview.setPixmap(pixmap)
        logger.info("Selected template image %s", path)
        self._update_state()

    def clear_image(self):
        self.file_bytes = None
        self.data_url = None
        self.preview.clear()
        self._update_state()

    # ───────────────────────────────────────────────
    # Upload
    # ───────────────────────────────────────────────
    def handle_upload(self):
        if self.file_bytes is None or self.is_uploading:
            return
        self.is_uploading = True
        self._update_state()

        # the editor reads the image from the cache before the upload resolves
        try:
            self.cache.set(self.data_url)
        except OSError as exc:
            logger.warning("Could not cache template image: %s", exc)

        self.tasks.start(
            self.store.upload,
            self.file_bytes,
            on_done=self._uploaded,
            on_fail=self._upload_failed,
        )

    def _uploaded(self, template_id: str):
        self.is_uploading = False
        self._update_state()
        logger.info("Template uploaded as %s", template_id)
        self.templateUploaded.emit(template_id)

    def _upload_failed(self, exc: Exception):
        self.is_uploading = False
        self._update_state()
        if isinstance(exc, InvalidInput):
            self._report(exc)
            return
        title, message, level = describe_error(exc, self.error_strings, SaveFailure)
        if self.error_notifier:
            self.error_notifier.emit_error(title, self.strings.get("upload_failed", message), level)

    def _report(self, exc: Exception, fallback=SaveFailure):
        title, message, level = describe_error(exc, self.error_strings, fallback)
        if self.error_notifier:
            self.error_notifier.emit_error(title, message, level)

    def shutdown(self):
        self.tasks.wait_all()
