"""Questionary / prompt_toolkit theme for mmui.

Questionary uses prompt_toolkit under the hood. This module defines the
central styles so all interactive prompts (confirm, expression preview)
look consistent.
"""

from __future__ import annotations

from prompt_toolkit.styles import Style

QUESTIONARY_STYLE_CONFIRM = Style.from_dict(
    {
        "question": "bold ansibrightred",
        "answer": "bold ansibrightred",
        "pointer": "bold ansibrightred",
        "highlighted": "bold ansibrightred",
        "selected": "bold ansibrightred",
        "separator": "ansibrightblack",
        "instruction": "ansibrightblack",
        "error": "bold ansired",
        "disabled": "ansibrightblack",
    }
)

PREVIEW_STYLE = Style.from_dict(
    {
        "prompt": "bold ansicyan",
        "bottom-toolbar": "noreverse ansibrightblack",
        "bottom-toolbar.count": "noreverse bold ansigreen",
        "bottom-toolbar.loading": "noreverse ansiyellow",
        "bottom-toolbar.error": "noreverse bold ansired",
    }
)
