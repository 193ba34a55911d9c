from pathlib import Path
from typing import override

import gi

from txtbeat.application.controller import MusicController
from txtbeat.domain.errors import AudioInitializationError, ConfigurationError
from txtbeat.infrastructure.audio_player import FluidSynthSink
from txtbeat.infrastructure.glib_timer import GLibTimer
from txtbeat.ui.components import ConfigPanel, StatusDisplay, StatusPanel, TextEditor

gi.require_version(namespace='Gtk', version='4.0')
gi.require_version(namespace='Adw', version='1')

from gi.repository import (  # noqa: E402
    Adw,  # pyright: ignore[reportMissingModuleSource]
    Gtk,  # pyright: ignore[reportMissingModuleSource]
)

DEFAULT_TEXT = 'CoR+D\nBPM+ CDEF GAB ?\n;R-EEE'


class MainWindow(Adw.ApplicationWindow):
    """Janela principal da aplicação."""

    def __init__(self, app: Adw.Application) -> None:
        super().__init__(application=app)
        self.set_title('txtbeat')
        self.set_default_size(600, 760)

        self.box_main: Gtk.Box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL)
        self.set_content(self.box_main)
        self._build_header()

        self.toast_overlay: Adw.ToastOverlay = Adw.ToastOverlay()
        self.toast_overlay.set_vexpand(True)
        self.box_main.append(self.toast_overlay)

        self.prefs_page: Adw.PreferencesPage = Adw.PreferencesPage()
        self.toast_overlay.set_child(self.prefs_page)

        self.config_panel: ConfigPanel = ConfigPanel()
        self.text_editor: TextEditor = TextEditor()
        self.status_panel: StatusPanel = StatusPanel()
        self.prefs_page.add(self.config_panel)
        self.prefs_page.add(self.text_editor)
        self.prefs_page.add(self.status_panel)
        self.text_editor.set_text(DEFAULT_TEXT)

        self.controller: MusicController = MusicController(
            display=StatusDisplay(
                panel=self.status_panel,
                editor=self.text_editor,
                on_finished_callback=self._on_playback_finished,
            ),
            timer=GLibTimer(),
            audio_factory=FluidSynthSink,
        )

    def _build_header(self) -> None:
        header = Adw.HeaderBar()
        self.box_main.append(header)

        self.btn_open: Gtk.Button = Gtk.Button.new_from_icon_name(
            'document-open-symbolic'
        )
        self.btn_open.set_tooltip_text('Abrir texto')
        _ = self.btn_open.connect('clicked', self._on_open_txt_clicked)
        header.pack_start(self.btn_open)

        box_controls = Gtk.Box(spacing=6)
        header.pack_end(box_controls)

        self.btn_play: Gtk.Button = Gtk.Button.new_from_icon_name(
            'media-playback-start-symbolic'
        )
        self.btn_play.set_tooltip_text('Tocar música')
        _ = self.btn_play.connect('clicked', self._on_play_clicked)
        box_controls.append(self.btn_play)

        self.btn_stop: Gtk.Button = Gtk.Button.new_from_icon_name(
            'media-playback-stop-symbolic'
        )
        self.btn_stop.set_tooltip_text('Parar reprodução')
        _ = self.btn_stop.connect('clicked', self._on_stop_clicked)
        self.btn_stop.set_sensitive(False)
        box_controls.append(self.btn_stop)

    def _on_play_clicked(self, _widget: Gtk.Button) -> None:
        try:
            self.controller.play_music(
                text=self.text_editor.get_text(),
                settings=self.config_panel.get_playback_settings(),
                soundfont_path=self.config_panel.get_soundfont_path(),
            )
        except (ConfigurationError, AudioInitializationError) as e:
            self._show_toast(message=str(e))
            return

        self.btn_play.set_sensitive(False)
        self.btn_stop.set_sensitive(True)
        self.btn_open.set_sensitive(False)
        self.text_editor.set_editable(False)

    def _on_stop_clicked(self, _widget: Gtk.Button) -> None:
        self.controller.stop_music()

    def _on_playback_finished(self) -> None:
        self.btn_play.set_sensitive(True)
        self.btn_stop.set_sensitive(False)
        self.btn_open.set_sensitive(True)
        self.text_editor.set_editable(True)
        self.status_panel.reset()

    def _on_open_txt_clicked(self, _widget: Gtk.Button) -> None:
        dialog: Gtk.FileChooserDialog = Gtk.FileChooserDialog(
            title='Abrir texto',
            transient_for=self,
            action=Gtk.FileChooserAction.OPEN,
        )
        _ = dialog.add_button(
            button_text='_Cancelar', response_id=Gtk.ResponseType.CANCEL
        )
        _ = dialog.add_button(button_text='_Abrir', response_id=Gtk.ResponseType.OK)

        file_filter: Gtk.FileFilter = Gtk.FileFilter()
        file_filter.set_name(name='Arquivos de texto (*.txt)')
        file_filter.add_pattern(pattern='*.txt')
        dialog.add_filter(filter=file_filter)

        _ = dialog.connect('response', self._on_open_txt_response)
        dialog.show()

    def _on_open_txt_response(
        self, dialog: Gtk.FileChooserDialog, response: Gtk.ResponseType
    ) -> None:
        if (
            response == Gtk.ResponseType.OK
            and (file := dialog.get_file())
            and (path := file.get_path())
        ):
            file_path = Path(path)
            try:
                content = self.controller.load_text(file_path)
            except ConfigurationError as e:
                self._show_toast(message=str(e))
            else:
                self.text_editor.set_text(content)
                self.set_title(f'txtbeat - {file_path.name}')
                self._show_toast(message=f'Carregado: {file_path.name}')
        dialog.destroy()

    def _show_toast(self, message: str) -> None:
        toast: Adw.Toast = Adw.Toast(title=message, timeout=3)
        self.toast_overlay.add_toast(toast)


class Application(Adw.Application):
    def __init__(self) -> None:
        super().__init__(application_id='io.github.txtbeat')
        self.window: MainWindow | None = None

    @override
    def do_activate(self) -> None:
        if not self.window:
            self.window = MainWindow(app=self)
        self.window.present()

    @override
    def do_shutdown(self) -> None:
        if self.window and self.window.controller:
            self.window.controller.shutdown()
        Adw.Application.do_shutdown(self)
