import os
from pathlib import Path

# Caminho padrão para o SoundFont
DEFAULT_SOUNDFONT = Path(os.environ.get('TXTBEAT_SOUNDFONT', 'FluidR3_GM.sf2'))

# Deslocamento em semitons de cada nota em relação a C
NOTE_OFFSETS = {
    'C': 0,
    'D': 2,
    'E': 4,
    'F': 5,
    'G': 7,
    'A': 9,
    'B': 11,
}

# Mapeamento de IDs do General MIDI para nomes
INSTRUMENTS = [
    (0, 'Acoustic Grand Piano'),
    (15, 'Tubular Bells'),
    (24, 'Acoustic Guitar (nylon)'),
    (25, 'Acoustic Guitar (steel)'),
    (33, 'Electric Bass (finger)'),
    (40, 'Violin'),
    (56, 'Trumpet'),
    (65, 'Alto Sax'),
    (73, 'Flute'),
    (110, 'Bag pipe'),
    (114, 'Agogo'),
    (123, 'Seashore'),
    (124, 'Telephone Ring'),
    (127, 'Gunshot'),
]

# Sequência percorrida a cada quebra de linha
INSTRUMENT_CYCLE = [0, 40, 73, 25, 56]

# Vogal sem nota anterior: telefone tocando C5
FALLBACK_INSTRUMENT = 124
FALLBACK_PITCH = 72

MIN_OCTAVE = 1
MAX_OCTAVE = 8
MAX_VOLUME = 100
MIN_BPM = 30
BPM_STEP = 80
RANDOM_BPM_RANGE = (60, 180)

# Valor máximo para dados MIDI (notas, volume, etc.)
MAX_MIDI_VALUE = 127


def instrument_name(instrument_id: int) -> str:
    """Retornar o nome General MIDI de um programa."""
    for program, name in INSTRUMENTS:
        if program == instrument_id:
            return name
    return f'Program {instrument_id}'
