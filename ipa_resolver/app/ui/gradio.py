"""Gradio front-end for the pronunciation service."""

from __future__ import annotations

import time
from typing import Any, Dict, List, Tuple

import gradio as gr

from ipa_resolver.remote.errors import InvalidRequestError

from ..services.pronunciation_service import PronunciationService, ResolutionMode

MODE_CHOICES: List[Tuple[str, str]] = [
    ("Dictionary (CMU)", ResolutionMode.CMU.value),
    ("Online dictionary (single word)", ResolutionMode.ONLINE.value),
    ("Hybrid (online, then CMU)", ResolutionMode.HYBRID.value),
]


def format_transcription(result: Dict[str, Any]) -> str:
    """Render a ``resolve_text`` result as Markdown."""

    if "ipa" in result:
        words = result.get("ipaWords") or []
        lines = [f"### {result['ipa'] or '_(nothing to transcribe)_'}"]
        if words:
            lines.append("")
            lines.append(" · ".join(f"`{word}`" for word in words))
        return "\n".join(lines)
    return format_lookup(result)


def format_lookup(result: Dict[str, Any]) -> str:
    """Render a dictionary lookup record as a Markdown table."""

    if not result.get("exists"):
        url = result.get("url")
        suffix = f" ([searched]({url}))" if url else ""
        return f"No pronunciation found{suffix}."

    lines = [f"### {result.get('headword') or ''}", ""]
    lines.append("| Headword | POS | US | UK |")
    lines.append("| --- | --- | --- | --- |")
    for row in result.get("pronunciations") or []:
        lines.append(
            "| {headword} | {pos} | {us} | {uk} |".format(
                headword=row.get("headword") or "",
                pos=row.get("partOfSpeech") or "",
                us=row.get("ipaUs") or "",
                uk=row.get("ipaUk") or "",
            )
        )
    if result.get("url"):
        lines.append("")
        lines.append(f"Source: {result['url']}")
    return "\n".join(lines)


def create_interface(service: PronunciationService) -> gr.Blocks:
    """Construct the interactive Gradio Blocks UI."""

    async def transcribe_interface(text: str, mode: str):
        if not text or not text.strip():
            return "Please enter some text to transcribe.", "", {}

        start_time = time.perf_counter()
        try:
            result = await service.resolve_text(text, mode)
        except InvalidRequestError as exc:
            return f"Request rejected: {exc}", "", {}

        elapsed = time.perf_counter() - start_time
        return (
            f"Resolved in {elapsed:.2f}s",
            format_transcription(result),
            result,
        )

    async def lookup_interface(word: str, cache_only: bool):
        if not word or not word.strip():
            return "Please enter a word to look up.", {}, None
        if cache_only:
            result = await service.lookup_word_cache_only(word)
        else:
            result = await service.lookup_word(word)
        audio_path = service.find_local_audio(word)
        return format_lookup(result), result, str(audio_path) if audio_path else None

    def reload_interface() -> str:
        count = service.reload_dictionary()
        return f"Dictionary reloaded with {count:,} entries."

    def invalidate_interface(word: str) -> str:
        if not word or not word.strip():
            return "Please enter a word to invalidate."
        if service.invalidate_word(word):
            return f"Cached lookup for `{word.strip()}` removed."
        return f"No cached lookup for `{word.strip()}`."

    with gr.Blocks(title="IPA Resolver", theme=gr.themes.Soft()) as interface:
        gr.Markdown(
            "<h2>IPA Resolver</h2>\n"
            "<p>Transcribe English words and sentences into IPA.</p>"
        )

        with gr.Tabs():
            with gr.Tab("Text → IPA"):
                text_input = gr.Textbox(
                    label="Text",
                    placeholder="e.g., The apple is red.",
                    lines=2,
                )
                mode_input = gr.Radio(
                    choices=MODE_CHOICES,
                    value=ResolutionMode.CMU.value,
                    label="Mode",
                )
                transcribe_btn = gr.Button("Transcribe", variant="primary")
                status_md = gr.Markdown(value="Waiting for input…")
                ipa_md = gr.Markdown()
                raw_json = gr.JSON(label="Response")

            with gr.Tab("Dictionary lookup"):
                word_input = gr.Textbox(label="Word", lines=1)
                cache_only_input = gr.Checkbox(value=False, label="Cache only")
                lookup_btn = gr.Button("Look up", variant="primary")
                lookup_md = gr.Markdown()
                lookup_json = gr.JSON(label="Record")
                lookup_audio = gr.Audio(label="Cached audio", type="filepath", interactive=False)

                with gr.Accordion("Maintenance", open=False):
                    with gr.Row():
                        reload_btn = gr.Button("Reload dictionary")
                        invalidate_btn = gr.Button("Invalidate cached word")
                    maintenance_md = gr.Markdown()

        transcribe_btn.click(
            fn=transcribe_interface,
            inputs=[text_input, mode_input],
            outputs=[status_md, ipa_md, raw_json],
        )
        text_input.submit(
            fn=transcribe_interface,
            inputs=[text_input, mode_input],
            outputs=[status_md, ipa_md, raw_json],
        )
        lookup_btn.click(
            fn=lookup_interface,
            inputs=[word_input, cache_only_input],
            outputs=[lookup_md, lookup_json, lookup_audio],
        )
        reload_btn.click(fn=reload_interface, inputs=[], outputs=[maintenance_md])
        invalidate_btn.click(
            fn=invalidate_interface,
            inputs=[word_input],
            outputs=[maintenance_md],
        )

    return interface


__all__ = ["create_interface", "format_lookup", "format_transcription"]
