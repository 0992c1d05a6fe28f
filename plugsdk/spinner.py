"""A terminal spinner that shows progress while work is going on."""

from __future__ import annotations

import contextlib
import os
import sys
import threading
from typing import Callable, Iterator, Sequence, TextIO

__all__ = [
    "CHAR_SETS",
    "Spinner",
    "InvalidColorError",
    "generate_number_sequence",
]

_WINDOWS = os.name == "nt"

_CLOCK_ONE_OCLOCK = 0x1F550
_CLOCK_ONE_THIRTY = 0x1F55C

CHAR_SETS: dict[int, tuple[str, ...]] = {
    0: ("←", "↖", "↑", "↗", "→", "↘", "↓", "↙"),
    1: ("▁", "▃", "▄", "▅", "▆", "▇", "█", "▇", "▆", "▅", "▄", "▃", "▁"),
    2: ("▖", "▘", "▝", "▗"),
    3: ("┤", "┘", "┴", "└", "├", "┌", "┬", "┐"),
    4: ("◢", "◣", "◤", "◥"),
    5: ("◰", "◳", "◲", "◱"),
    6: ("◴", "◷", "◶", "◵"),
    7: ("◐", "◓", "◑", "◒"),
    8: (".", "o", "O", "@", "*"),
    9: ("|", "/", "-", "\\"),
    10: ("◡◡", "⊙⊙", "◠◠"),
    11: ("⣾", "⣽", "⣻", "⢿", "⡿", "⣟", "⣯", "⣷"),
    12: (">))'>", " >))'>", "  >))'>", "   >))'>", "    >))'>", "   <'((<", "  <'((<", " <'((<"),
    13: ("⠁", "⠂", "⠄", "⡀", "⢀", "⠠", "⠐", "⠈"),
    14: ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"),
    15: tuple("abcdefghijklmnopqrstuvwxyz"),
    16: ("▉", "▊", "▋", "▌", "▍", "▎", "▏", "▎", "▍", "▌", "▋", "▊", "▉"),
    17: ("■", "□", "▪", "▫"),
    18: ("←", "↑", "→", "↓"),
    19: ("╫", "╪"),
    20: ("⇐", "⇖", "⇑", "⇗", "⇒", "⇘", "⇓", "⇙"),
    21: ("⠁", "⠁", "⠉", "⠙", "⠚", "⠒", "⠂", "⠂", "⠒", "⠲", "⠴", "⠤", "⠄", "⠄", "⠤", "⠠", "⠠", "⠤", "⠦", "⠖", "⠒", "⠐", "⠐", "⠒", "⠓", "⠋", "⠉", "⠈", "⠈"),
    22: ("⠈", "⠉", "⠋", "⠓", "⠒", "⠐", "⠐", "⠒", "⠖", "⠦", "⠤", "⠠", "⠠", "⠤", "⠦", "⠖", "⠒", "⠐", "⠐", "⠒", "⠓", "⠋", "⠉", "⠈"),
    23: ("⠁", "⠉", "⠙", "⠚", "⠒", "⠂", "⠂", "⠒", "⠲", "⠴", "⠤", "⠄", "⠄", "⠤", "⠴", "⠲", "⠒", "⠂", "⠂", "⠒", "⠚", "⠙", "⠉", "⠁"),
    24: ("⠋", "⠙", "⠚", "⠒", "⠂", "⠂", "⠒", "⠲", "⠴", "⠦", "⠖", "⠒", "⠐", "⠐", "⠒", "⠓", "⠋"),
    25: ("ｦ", "ｧ", "ｨ", "ｩ", "ｪ", "ｫ", "ｬ", "ｭ", "ｮ", "ｯ", "ｱ", "ｲ", "ｳ", "ｴ", "ｵ", "ｶ", "ｷ", "ｸ", "ｹ", "ｺ", "ｻ", "ｼ", "ｽ", "ｾ", "ｿ", "ﾀ", "ﾁ", "ﾂ", "ﾃ", "ﾄ", "ﾅ", "ﾆ", "ﾇ", "ﾈ", "ﾉ", "ﾊ", "ﾋ", "ﾌ", "ﾍ", "ﾎ", "ﾏ", "ﾐ", "ﾑ", "ﾒ", "ﾓ", "ﾔ", "ﾕ", "ﾖ", "ﾗ", "ﾘ", "ﾙ", "ﾚ", "ﾛ", "ﾜ", "ﾝ"),
    26: (".", "..", "..."),
    27: ("▁", "▂", "▃", "▄", "▅", "▆", "▇", "█", "▉", "▊", "▋", "▌", "▍", "▎", "▏", "▏", "▎", "▍", "▌", "▋", "▊", "▉", "█", "▇", "▆", "▅", "▄", "▃", "▂", "▁"),
    28: (".", "o", "O", "°", "O", "o", "."),
    29: ("+", "x"),
    30: ("v", "<", "^", ">"),
    31: (">>--->", " >>--->", "  >>--->", "   >>--->", "    >>--->", "    <---<<", "   <---<<", "  <---<<", " <---<<", "<---<<"),
    32: ("|", "||", "|||", "||||", "|||||", "|||||||", "||||||||", "|||||||", "||||||", "|||||", "||||", "|||", "||", "|"),
    33: ("[          ]", "[=         ]", "[==        ]", "[===       ]", "[====      ]", "[=====     ]", "[======    ]", "[=======   ]", "[========  ]", "[========= ]", "[==========]"),
    34: ("(*---------)", "(-*--------)", "(--*-------)", "(---*------)", "(----*-----)", "(-----*----)", "(------*---)", "(-------*--)", "(--------*-)", "(---------*)"),
    35: ("█▒▒▒▒▒▒▒▒▒", "███▒▒▒▒▒▒▒", "█████▒▒▒▒▒", "███████▒▒▒", "██████████"),
    36: ("[                    ]", "[=>                  ]", "[===>                ]", "[=====>              ]", "[======>             ]", "[========>           ]", "[==========>         ]", "[============>       ]", "[==============>     ]", "[================>   ]", "[==================> ]", "[===================>]"),
    37: tuple(chr(_CLOCK_ONE_OCLOCK + i) for i in range(12)),
    38: tuple(
        ch
        for i in range(12)
        for ch in (chr(_CLOCK_ONE_OCLOCK + i), chr(_CLOCK_ONE_THIRTY + i))
    ),
    39: ("🌍", "🌎", "🌏"),
    40: ("◜", "◝", "◞", "◟"),
    41: ("⬒", "⬔", "⬓", "⬕"),
    42: ("⬖", "⬘", "⬗", "⬙"),
    43: ("[>>>          >]", "[]>>>>        []", "[]  >>>>      []", "[]    >>>>    []", "[]      >>>>  []", "[]        >>>>[]", "[>>          >>]"),
    44: ("♠", "♣", "♥", "♦"),
    45: ("➞", "➟", "➠", "➡", "➠", "➟"),
    46: ("  |  ", " \\   ", "_    ", " \\   ", "  |  ", "   / ", "    _", "   / "),
    47: ("  . . . .", ".   . . .", ". .   . .", ". . .   .", ". . . .  ", ". . . . ."),
    48: (" |     ", "  /    ", "   _   ", "    \\  ", "     | ", "    \\  ", "   _   ", "  /    "),
    49: ("⎺", "⎻", "⎼", "⎽", "⎼", "⎻"),
    50: ("▹▹▹▹▹", "▸▹▹▹▹", "▹▸▹▹▹", "▹▹▸▹▹", "▹▹▹▸▹", "▹▹▹▹▸"),
    51: ("[    ]", "[   =]", "[  ==]", "[ ===]", "[====]", "[=== ]", "[==  ]", "[=   ]"),
    52: ("( ●    )", "(  ●   )", "(   ●  )", "(    ● )", "(     ●)", "(    ● )", "(   ●  )", "(  ●   )", "( ●    )"),
    53: ("✶", "✸", "✹", "✺", "✹", "✷"),
    54: ("▐|\\____________▌", "▐_|\\___________▌", "▐__|\\__________▌", "▐___|\\_________▌", "▐____|\\________▌", "▐_____|\\_______▌", "▐______|\\______▌", "▐_______|\\_____▌", "▐________|\\____▌", "▐_________|\\___▌", "▐__________|\\__▌", "▐___________|\\_▌", "▐____________|\\▌", "▐____________/|▌", "▐___________/|_▌", "▐__________/|__▌", "▐_________/|___▌", "▐________/|____▌", "▐_______/|_____▌", "▐______/|______▌", "▐_____/|_______▌", "▐____/|________▌", "▐___/|_________▌", "▐__/|__________▌", "▐_/|___________▌", "▐/|____________▌"),
    55: ("▐⠂       ▌", "▐⠈       ▌", "▐ ⠂      ▌", "▐ ⠠      ▌", "▐  ⡀     ▌", "▐  ⠠     ▌", "▐   ⠂    ▌", "▐   ⠈    ▌", "▐    ⠂   ▌", "▐    ⠠   ▌", "▐     ⡀  ▌", "▐     ⠠  ▌", "▐      ⠂ ▌", "▐      ⠈ ▌", "▐       ⠂▌", "▐       ⠠▌", "▐       ⡀▌", "▐      ⠠ ▌", "▐      ⠂ ▌", "▐     ⠈  ▌", "▐     ⠂  ▌", "▐    ⠠   ▌", "▐    ⡀   ▌", "▐   ⠠    ▌", "▐   ⠂    ▌", "▐  ⠈     ▌", "▐  ⠂     ▌", "▐ ⠠      ▌", "▐ ⡀      ▌", "▐⠠       ▌"),
    56: ("¿", "?"),
    57: ("⢹", "⢺", "⢼", "⣸", "⣇", "⡧", "⡗", "⡏"),
    58: ("⢄", "⢂", "⢁", "⡁", "⡈", "⡐", "⡠"),
    59: (".  ", ".. ", "...", " ..", "  .", "   "),
    60: (".", "o", "O", "°", "O", "o", "."),
    61: ("▓", "▒", "░"),
    62: ("▌", "▀", "▐", "▄"),
    63: ("⊶", "⊷"),
    64: ("▪", "▫"),
    65: ("□", "■"),
    66: ("▮", "▯"),
    67: ("-", "=", "≡"),
    68: ("d", "q", "p", "b"),
    69: ("∙∙∙", "●∙∙", "∙●∙", "∙∙●", "∙∙∙"),
    70: ("🌑 ", "🌒 ", "🌓 ", "🌔 ", "🌕 ", "🌖 ", "🌗 ", "🌘 "),
    71: ("☗", "☖"),
    72: ("⧇", "⧆"),
    73: ("◉", "◎"),
    74: ("㊂", "㊀", "㊁"),
    75: ("⦾", "⦿"),
    76: ("ဝ", "၀"),
    77: ("▌", "▀", "▐▄"),
}

# ANSI SGR codes for every colour and attribute name a spinner accepts.
_ATTRIBUTES: dict[str, int] = {
    "black": 30,
    "red": 31,
    "green": 32,
    "yellow": 33,
    "blue": 34,
    "magenta": 35,
    "cyan": 36,
    "white": 37,
    "reset": 0,
    "bold": 1,
    "faint": 2,
    "italic": 3,
    "underline": 4,
    "blinkslow": 5,
    "blinkrapid": 6,
    "reversevideo": 7,
    "concealed": 8,
    "crossedout": 9,
    "fgBlack": 30,
    "fgRed": 31,
    "fgGreen": 32,
    "fgYellow": 33,
    "fgBlue": 34,
    "fgMagenta": 35,
    "fgCyan": 36,
    "fgWhite": 37,
    "fgHiBlack": 90,
    "fgHiRed": 91,
    "fgHiGreen": 92,
    "fgHiYellow": 93,
    "fgHiBlue": 94,
    "fgHiMagenta": 95,
    "fgHiCyan": 96,
    "fgHiWhite": 97,
    "bgBlack": 40,
    "bgRed": 41,
    "bgGreen": 42,
    "bgYellow": 43,
    "bgBlue": 44,
    "bgMagenta": 45,
    "bgCyan": 46,
    "bgWhite": 47,
    "bgHiBlack": 100,
    "bgHiRed": 101,
    "bgHiGreen": 102,
    "bgHiYellow": 103,
    "bgHiBlue": 104,
    "bgHiMagenta": 105,
    "bgHiCyan": 106,
    "bgHiWhite": 107,
}


def _stdout_is_terminal() -> bool:
    stream = sys.stdout
    if stream is None:
        return False
    try:
        return stream.isatty()
    except (AttributeError, ValueError, OSError):
        return False


# Colour is disabled for dumb terminals and when stdout is not a terminal.
_NO_COLOR = os.environ.get("TERM") == "dumb" or not _stdout_is_terminal()


def _sprint_func(codes: Sequence[int]) -> Callable[[str], str]:
    if _NO_COLOR:
        return str
    sequence = ";".join(str(code) for code in codes)
    return lambda text: f"\x1b[{sequence}m{text}\x1b[0m"


class InvalidColorError(ValueError):
    """Raised when setting a colour name the spinner does not know."""

    def __init__(self, name: str = "") -> None:
        super().__init__(f"invalid color: {name}" if name else "invalid color")
        self.name = name


def _write(stream: TextIO, text: str) -> None:
    stream.write(text)
    flush = getattr(stream, "flush", None)
    if flush is not None:
        flush()


class Spinner:
    """A progress indicator cycling through a character set.

    ``prefix``, ``suffix``, ``final_msg``, ``hide_cursor``, ``writer``,
    ``pre_update`` and ``post_update`` may be assigned directly. The update
    hooks are called with the spinner, while its lock is held, around every
    frame that is drawn.
    """

    def __init__(
        self,
        chars: Sequence[str],
        delay: float,
        color: str | None = None,
        suffix: str = "",
        final_msg: str = "",
        hide_cursor: bool = False,
        writer: TextIO | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self._chars: list[str] = list(chars)
        self.delay = delay
        self.prefix = ""
        self.suffix = suffix
        self.final_msg = final_msg
        self.hide_cursor = hide_cursor
        self.writer: TextIO = writer if writer is not None else sys.stdout
        self.pre_update: Callable[[Spinner], None] | None = None
        self.post_update: Callable[[Spinner], None] | None = None
        self._color = _sprint_func((_ATTRIBUTES["white"],))
        self._last_output = ""
        self._active = False
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

        # Setting a colour restarts the spinner, so this starts it running.
        # An unknown colour given here is ignored.
        if color is not None:
            with contextlib.suppress(InvalidColorError):
                self.set_color(color)

    @property
    def active(self) -> bool:
        """Whether the spinner is currently running."""
        return self._active

    @property
    def chars(self) -> tuple[str, ...]:
        """The character set in use."""
        with self._lock:
            return tuple(self._chars)

    def start(self) -> None:
        """Start the spinner; does nothing if it is already running."""
        with self._lock:
            if self._active:
                return
            if self.delay <= 0:
                raise ValueError("spinner delay must be positive")
            if self.hide_cursor and not _WINDOWS and sys.stdout is not None:
                _write(sys.stdout, "\x1b[?25l")
            self._active = True
            stop_event = threading.Event()
            self._stop_event = stop_event
            self._thread = threading.Thread(
                target=self._run, args=(stop_event, self.delay), daemon=True
            )
            self._thread.start()

    def _run(self, stop_event: threading.Event, delay: float) -> None:
        index = 0
        while not stop_event.wait(delay):
            with self._lock:
                if not self._active or stop_event.is_set():
                    return
                if not self._chars:
                    continue
                if index >= len(self._chars):
                    index = 0
                self._draw(self._chars[index])
                index += 1

    def _draw(self, char: str) -> None:
        self._erase()
        if self.pre_update is not None:
            self.pre_update(self)

        plain = f"\r{self.prefix}{char}{self.suffix} "
        if _WINDOWS and self.writer is sys.stderr:
            colored = plain
        else:
            colored = f"\r{self.prefix}{self._color(char)}{self.suffix} "
        _write(self.writer, colored)
        self._last_output = plain

        if self.post_update is not None:
            self.post_update(self)

    def stop(self) -> None:
        """Stop the spinner, erase it and write the final message."""
        with self._lock:
            if not self._active:
                return
            self._active = False
            self._stop_event.set()
            thread = self._thread
            self._thread = None

        if thread is not None and thread is not threading.current_thread():
            thread.join()

        with self._lock:
            if self.hide_cursor and not _WINDOWS and sys.stdout is not None:
                _write(sys.stdout, "\x1b[?25h")
            self._erase()
            if self.final_msg:
                _write(self.writer, self.final_msg)

    def restart(self) -> None:
        """Stop and start the spinner."""
        self.stop()
        self.start()

    def reverse(self) -> None:
        """Reverse the order of the character set."""
        with self._lock:
            self._chars.reverse()

    def set_color(self, *args: str) -> None:
        """Set the colour and attributes of the spinner, then restart it."""
        codes = []
        for name in args:
            if name not in _ATTRIBUTES:
                raise InvalidColorError(name)
            codes.append(_ATTRIBUTES[name])
        with self._lock:
            self._color = _sprint_func(codes)
        self.restart()

    def update_speed(self, delay: float) -> None:
        """Set the delay between frames; applies from the next start."""
        with self._lock:
            self.delay = delay

    def update_char_set(self, chars: Sequence[str]) -> None:
        """Replace the character set."""
        with self._lock:
            self._chars = list(chars)

    @contextlib.contextmanager
    def locked(self) -> Iterator[Spinner]:
        """Hold the spinner's lock, pausing its drawing, for the block."""
        with self._lock:
            yield self

    def _erase(self) -> None:
        """Remove the last frame; the caller holds the lock."""
        count = len(self._last_output)
        if _WINDOWS:
            _write(self.writer, "\r" + " " * count + "\r")
            self._last_output = ""
            return
        for sequence in ("\b", "\127", "\b", "\x1b[K"):
            self.writer.write(sequence * count)
        _write(self.writer, "\r\x1b[K")
        self._last_output = ""


def generate_number_sequence(length: int) -> list[str]:
    """Return the numbers from 0 up to ``length`` as strings."""
    if length < 0:
        raise ValueError("length must not be negative")
    return [str(i) for i in range(length)]