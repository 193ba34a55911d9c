from collections.abc import Callable
from pathlib import Path
from typing import override

import gi

from txtbeat.application.ports import DisplaySink
from txtbeat.config import (
    DEFAULT_SOUNDFONT,
    INSTRUMENTS,
    MAX_OCTAVE,
    MAX_VOLUME,
    MIN_BPM,
    MIN_OCTAVE,
    instrument_name,
)
from txtbeat.domain.events import StateSnapshot
from txtbeat.domain.models import NoteCasePolicy, PlaybackSettings

gi.require_version(namespace='Gtk', version='4.0')
gi.require_version(namespace='Adw', version='1')

from gi.repository import (  # noqa: E402
    Adw,  # pyright: ignore[reportMissingModuleSource]
    Gdk,  # pyright: ignore[reportMissingModuleSource]
    Gio,  # pyright: ignore[reportMissingModuleSource]
    Gtk,  # pyright: ignore[reportMissingModuleSource]
)

PRINTABLE_CONTROL = {'\n': '\\n', '\r': '\\r', ' ': '␣', '\t': '\\t'}


def _spin_row(title: str, value: int, lower: int, upper: int) -> Adw.SpinRow:
    adjustment = Gtk.Adjustment(
        value=value,
        lower=lower,
        upper=upper,
        step_increment=1,
        page_increment=0,
        page_size=0,
    )
    row: Adw.SpinRow = Adw.SpinRow()
    row.set_title(title)
    row.set_adjustment(adjustment)
    row.set_digits(0)
    return row


class ConfigPanel(Adw.PreferencesGroup):
    """Parâmetros iniciais da execução."""

    def __init__(self) -> None:
        super().__init__()
        self.set_title('Parâmetros iniciais')

        defaults = PlaybackSettings()
        self.current_soundfont_path: Path = DEFAULT_SOUNDFONT

        self.spin_bpm: Adw.SpinRow = _spin_row(
            'BPM (batidas por minuto)', defaults.bpm, MIN_BPM, 400
        )
        self.spin_volume: Adw.SpinRow = _spin_row(
            'Volume inicial', defaults.volume, 0, MAX_VOLUME
        )
        self.spin_octave: Adw.SpinRow = _spin_row(
            'Oitava inicial', defaults.octave, MIN_OCTAVE, MAX_OCTAVE
        )
        self.add(self.spin_bpm)
        self.add(self.spin_volume)
        self.add(self.spin_octave)

        self.combo_instrument: Adw.ComboRow = Adw.ComboRow()
        self.combo_instrument.set_title('Instrumento inicial')
        self.combo_instrument.set_model(
            Gtk.StringList.new(strings=[name for _id, name in INSTRUMENTS])
        )
        self.set_instrument(defaults.instrument_id)
        self.add(self.combo_instrument)

        self.switch_uppercase: Adw.SwitchRow = Adw.SwitchRow()
        self.switch_uppercase.set_title('Somente maiúsculas tocam notas')
        self.switch_uppercase.set_subtitle('Letras minúsculas viram silêncio')
        self.add(self.switch_uppercase)

        self.soundfont_row: Adw.ActionRow = Adw.ActionRow()
        self.soundfont_row.set_title('SoundFont')
        self.soundfont_row.set_subtitle(str(self.current_soundfont_path))
        btn_soundfont: Gtk.Button = Gtk.Button.new_from_icon_name(
            'document-open-symbolic'
        )
        btn_soundfont.set_valign(Gtk.Align.CENTER)
        _ = btn_soundfont.connect('clicked', self._on_select_soundfont)
        self.soundfont_row.add_suffix(btn_soundfont)
        self.add(self.soundfont_row)

    def _on_select_soundfont(self, btn: Gtk.Button) -> None:
        root: Gtk.Root | None = btn.get_root()
        window: Gtk.Window | None = root if isinstance(root, Gtk.Window) else None

        dialog: Gtk.FileChooserDialog = Gtk.FileChooserDialog(
            title='Selecionar SoundFont',
            transient_for=window,
            action=Gtk.FileChooserAction.OPEN,
        )
        _ = dialog.add_button(
            button_text='_Cancelar', response_id=Gtk.ResponseType.CANCEL
        )
        _ = dialog.add_button(button_text='_Abrir', response_id=Gtk.ResponseType.OK)

        filter_sf2: Gtk.FileFilter = Gtk.FileFilter()
        filter_sf2.set_name(name='SoundFont files (*.sf2)')
        filter_sf2.add_pattern(pattern='*.sf2')
        dialog.add_filter(filter=filter_sf2)

        _ = dialog.connect('response', self._on_soundfont_response)
        dialog.show()

    def _on_soundfont_response(
        self, dialog: Gtk.FileChooserDialog, response: Gtk.ResponseType
    ) -> None:
        if response == Gtk.ResponseType.OK:
            file: Gio.File | None = dialog.get_file()
            if file and (path := file.get_path()):
                self.current_soundfont_path = Path(path)
                self.soundfont_row.set_subtitle(str(self.current_soundfont_path))
        dialog.destroy()

    def get_playback_settings(self) -> PlaybackSettings:
        policy = (
            NoteCasePolicy.UPPERCASE_ONLY
            if self.switch_uppercase.get_active()
            else NoteCasePolicy.CASE_INSENSITIVE
        )
        return PlaybackSettings(
            bpm=int(self.spin_bpm.get_value()),
            volume=int(self.spin_volume.get_value()),
            octave=int(self.spin_octave.get_value()),
            instrument_id=INSTRUMENTS[self.combo_instrument.get_selected()][0],
            case_policy=policy,
        )

    def set_instrument(self, instrument_id: int) -> None:
        for idx, (program, _name) in enumerate(INSTRUMENTS):
            if program == instrument_id:
                self.combo_instrument.set_selected(idx)
                return

    def get_soundfont_path(self) -> Path:
        return self.current_soundfont_path


class TextEditor(Adw.PreferencesGroup):
    """Editor do texto de entrada, com destaque do trecho em execução."""

    def __init__(self) -> None:
        super().__init__()
        self.set_title('Texto de entrada')
        self.set_description('Carregue um arquivo .txt ou digite o texto.')

        self.textview: Gtk.TextView = Gtk.TextView()
        self.textview.set_wrap_mode(Gtk.WrapMode.WORD_CHAR)
        self.textview.set_monospace(True)
        self.textview.set_vexpand(True)
        self.textview.set_left_margin(6)
        self.textview.set_right_margin(6)
        self.textview.set_top_margin(6)
        self.textview.set_bottom_margin(6)

        self.buffer: Gtk.TextBuffer = self.textview.get_buffer()
        self.highlight_tag: Gtk.TextTag = self.buffer.create_tag('highlight')
        self.highlight_tag.set_property(
            'background-rgba', Gdk.RGBA(0.2, 0.52, 0.9, 0.4)
        )

        scrolled_window = Gtk.ScrolledWindow()
        scrolled_window.set_policy(Gtk.PolicyType.AUTOMATIC, Gtk.PolicyType.AUTOMATIC)
        scrolled_window.set_min_content_height(150)
        scrolled_window.set_child(self.textview)

        text_frame = Gtk.Frame()
        text_frame.set_child(scrolled_window)
        self.add(text_frame)

    def get_text(self) -> str:
        return self.buffer.get_text(
            start=self.buffer.get_start_iter(),
            end=self.buffer.get_end_iter(),
            include_hidden_chars=False,
        )

    def set_text(self, text: str) -> None:
        self.buffer.set_text(text)

    def set_editable(self, editable: bool) -> None:
        self.textview.set_editable(editable)

    def clear_highlight(self) -> None:
        self.buffer.remove_tag(
            self.highlight_tag,
            self.buffer.get_start_iter(),
            self.buffer.get_end_iter(),
        )

    def highlight_range(self, index: int, length: int) -> None:
        if length <= 0:
            return

        start_iter: Gtk.TextIter = self.buffer.get_iter_at_offset(index)
        end_iter: Gtk.TextIter = self.buffer.get_iter_at_offset(index + length)

        self.clear_highlight()
        self.buffer.apply_tag(self.highlight_tag, start_iter, end_iter)
        _ = self.textview.scroll_to_iter(start_iter, 0.0, False, 0.0, 0.0)


class StatusPanel(Adw.PreferencesGroup):
    """Estado atual da execução."""

    def __init__(self) -> None:
        super().__init__()
        self.set_title('Estado')

        self.row_note: Adw.ActionRow = self._add_row('Caractere (nota)')
        self.row_instrument: Adw.ActionRow = self._add_row('Instrumento')
        self.row_volume: Adw.ActionRow = self._add_row('Volume')
        self.row_octave: Adw.ActionRow = self._add_row('Oitava')
        self.row_bpm: Adw.ActionRow = self._add_row('BPM')

        self.progress: Gtk.ProgressBar = Gtk.ProgressBar()
        self.progress.set_show_text(True)
        self.progress.set_margin_top(12)
        self.add(self.progress)
        self.reset()

    def _add_row(self, title: str) -> Adw.ActionRow:
        row: Adw.ActionRow = Adw.ActionRow()
        row.set_title(title)
        row.set_subtitle('-')
        row.add_css_class('property')
        self.add(row)
        return row

    def show_character(
        self, char: str, pitch: int | None, processed: int, total: int
    ) -> None:
        shown = ''.join(PRINTABLE_CONTROL.get(c, c) for c in char)
        note = '-' if pitch is None else str(pitch)
        self.row_note.set_subtitle(f'{shown} ({note})')
        self.progress.set_fraction(processed / total if total else 0.0)
        self.progress.set_text(f'{processed}/{total}')

    def show_state(self, state: StateSnapshot) -> None:
        self.row_instrument.set_subtitle(instrument_name(state.instrument_id))
        self.row_volume.set_subtitle(str(state.volume))
        self.row_octave.set_subtitle(str(state.octave))
        self.row_bpm.set_subtitle(str(state.bpm))

    def reset(self) -> None:
        self.row_note.set_subtitle('-')
        self.progress.set_fraction(0.0)
        self.progress.set_text('0/0')


class StatusDisplay(DisplaySink):
    """Encaminha o progresso da execução para os widgets da janela."""

    def __init__(
        self,
        panel: StatusPanel,
        editor: TextEditor,
        on_finished_callback: Callable[[], None] | None = None,
    ) -> None:
        self.panel: StatusPanel = panel
        self.editor: TextEditor = editor
        self.finished_callback: Callable[[], None] | None = on_finished_callback

    @override
    def on_character_processed(
        self, char: str, pitch: int | None, processed: int, total: int
    ) -> None:
        self.panel.show_character(char, pitch, processed, total)
        self.editor.highlight_range(processed - len(char), len(char))

    @override
    def on_state_changed(self, state: StateSnapshot) -> None:
        self.panel.show_state(state)

    @override
    def on_stopped(self) -> None:
        self.editor.clear_highlight()
        if self.finished_callback:
            self.finished_callback()
