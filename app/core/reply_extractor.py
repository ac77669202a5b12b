"""Normalisiert eine Voiceflow-Antwort (Liste von Trace-Events) zu einem
einzigen Antworttext."""
from typing import Any, List


def unwrap_traces(data: Any) -> Any:
    """Voiceflow liefert entweder direkt eine Trace-Liste oder ein Objekt,
    das sie unter `trace` bzw. `traces` enthält."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return data.get("trace") or data.get("traces") or data
    return data


def _slate_text(slate: Any) -> str:
    content = slate.get("content") if isinstance(slate, dict) else None
    if not isinstance(content, list):
        return ""

    blocks: List[str] = []
    for block in content:
        children = block.get("children") if isinstance(block, dict) else None
        if not isinstance(children, list):
            continue
        texts = []
        for child in children:
            text = child.get("text") if isinstance(child, dict) else None
            if isinstance(text, str) and text.strip():
                texts.append(text.strip())
        if texts:
            blocks.append(" ".join(texts))
    return "\n".join(blocks)


def extract_reply(traces: Any) -> str:
    """Sammelt die Texte aller `text`-Traces in Reihenfolge.

    - `payload.message` hat Vorrang, sofern nicht leer.
    - Sonst wird das Rich-Text-Dokument unter `payload.slate` ausgewertet:
      Texte eines Blocks mit Leerzeichen, Blöcke mit Zeilenumbruch verbunden.
    - Andere Trace-Typen und unbekannte Formen tragen nichts bei.

    Ein leeres Ergebnis ersetzt der Aufrufer durch seinen Fallback-Text.
    """
    if not isinstance(traces, list):
        return ""

    parts: List[str] = []
    for trace in traces:
        if not isinstance(trace, dict) or trace.get("type") != "text":
            continue
        payload = trace.get("payload")
        if not isinstance(payload, dict):
            continue

        message = payload.get("message")
        if isinstance(message, str) and message.strip():
            parts.append(message.strip())
            continue

        rich_text = _slate_text(payload.get("slate"))
        if rich_text:
            parts.append(rich_text)

    return "\n".join(parts).strip()
