"""Pattern detector — heuristic regex matching for emails, phones and names.

Matchers run in a fixed priority order: email, then phone, then name.
The name matcher is a broad heuristic (runs of capitalized words), so it
comes last.  Overlaps across categories are not resolved here: a
capitalized word inside an email is reported both as part of the EMAIL
and as a NAME.
"""

from __future__ import annotations
import re
from typing import AbstractSet

from .types import EMAIL, NAME, PHONE, PiiOccurrence

_NAME_WORD = r"[A-ZÁÉÍÓÚÑ][a-záéíóúñ]+"

# Each pattern: (category, compiled_regex), in priority order
_PATTERNS: list[tuple[str, re.Pattern]] = [
    (EMAIL, re.compile(
        r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b"
    )),

    # Colombian mobile/landline: optional +57, prefix 3xx or 6xx-9xx, 3 + 4 digits
    (PHONE, re.compile(
        r"(?<!\w)"
        r"(?:\+?57\s?)?"
        r"[36-9]\d{2}\s?\d{3}\s?\d{4}"
        r"\b"
    )),

    (NAME, re.compile(
        rf"\b{_NAME_WORD}(?:\s+{_NAME_WORD})*\b"
    )),
]

_WORD = re.compile(_NAME_WORD)

# Capitalized words that start sentences or greetings far more often than names
DEFAULT_NAME_STOPWORDS: frozenset[str] = frozenset({
    # English
    "The", "An", "And", "But", "Or", "So", "If", "Is", "Are", "It", "We",
    "You", "He", "She", "They", "My", "Our", "Your", "His", "Her", "Their",
    "This", "That", "These", "Those", "Then", "There", "Here", "When", "What",
    "Where", "Who", "Why", "How", "Yes", "No", "Ok", "Okay", "Hello", "Hi",
    "Hey", "Dear", "Contact", "Please", "Thanks", "Thank", "Call", "Email",
    "Send", "Write", "Reach", "Tell", "Ask", "Phone", "Name", "Good",
    "Morning", "Afternoon", "Evening", "Best", "Regards", "Sincerely",
    "Mr", "Mrs", "Ms", "Dr",
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
    "Sunday",
    # Spanish
    "Hola", "Buenos", "Buenas", "Días", "Tardes", "Noches", "Gracias", "Por",
    "Favor", "Mi", "Tu", "Su", "El", "La", "Los", "Las", "Un", "Una", "Yo",
    "Querido", "Querida", "Estimado", "Estimada", "Llama", "Llamar",
    "Escribe", "Escribir", "Contacto", "Correo", "Teléfono", "Nombre",
    "Señor", "Señora", "Sr", "Sra", "Saludos", "Atentamente",
})


def scan(
    text: str,
    *,
    name_stopwords: AbstractSet[str] = DEFAULT_NAME_STOPWORDS,
) -> list[PiiOccurrence]:
    """Run all matchers. Returns occurrences in priority order, then document order."""
    occurrences: list[PiiOccurrence] = []
    for category, pattern in _PATTERNS:
        for m in pattern.finditer(text):
            if category == NAME:
                occurrences.extend(_split_name(m, name_stopwords))
            else:
                occurrences.append(PiiOccurrence(
                    category=category,
                    text=m.group(),
                    start=m.start(),
                    end=m.end(),
                ))
    return occurrences


def detect_pii(
    text: str,
    *,
    name_stopwords: AbstractSet[str] = DEFAULT_NAME_STOPWORDS,
) -> dict[str, list[str]]:
    """Map each category to its matched substrings in document order.

    Duplicates are preserved; categories without matches are absent.
    """
    detected: dict[str, list[str]] = {}
    for occ in scan(text, name_stopwords=name_stopwords):
        detected.setdefault(occ.category, []).append(occ.text)
    return detected


def _split_name(
    match: re.Match,
    stopwords: AbstractSet[str],
) -> list[PiiOccurrence]:
    """Break a run of capitalized words around stopwords."""
    runs: list[list[re.Match]] = [[]]
    for word in _WORD.finditer(match.group()):
        if word.group() in stopwords:
            runs.append([])
        else:
            runs[-1].append(word)

    out: list[PiiOccurrence] = []
    base = match.start()
    for run in runs:
        if not run:
            continue
        start = base + run[0].start()
        end = base + run[-1].end()
        out.append(PiiOccurrence(
            category=NAME,
            text=match.string[start:end],
            start=start,
            end=end,
        ))
    return out
