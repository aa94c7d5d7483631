"""Application state and user-action transitions.

:class:`AppState` is an immutable snapshot of everything the studio screen
shows.  Each user action is a pure function taking a state and returning a
new one; results of asynchronous work (an upload finishing, a generation
returning, a dictation transcript arriving) are fed through the same
functions, so there is a single writer for state.

The HTTP layer reuses the rule helpers here (:func:`generate_blocker`,
:func:`reuse_target`, :func:`download_filename`) so the server enforces the
same rules the page applies.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, replace

from photostudio.core.images import ImageInput
from photostudio.core.library import Library, SavedImage, is_saved, select_for_reuse
from photostudio.core.presets import (
    DEFAULT_ASPECT_RATIO,
    FeatureKey,
    StyleKey,
    requires_image,
    ui_text,
)


@dataclass(frozen=True)
class AppState:
    """Snapshot of the studio screen.

    Attributes:
        language: UI language code.
        active_tab: Selected feature tab.
        prompt: Prompt text.
        style: Selected style preset.
        aspect_ratio: Aspect ratio for text-only generation.
        input_image1: First input image slot.
        input_image2: Second input image slot (image fusion only).
        output_image: Data URL of the last generated image.
        is_loading: Whether a generation is in flight.
        error: User-visible error message.
        notice: User-visible informational message.
        library: Saved images, newest first.
        is_library_open: Whether the library panel is shown.
        is_listening: Whether speech dictation is running.
        dictation_prefix: Prompt text that dictated words are appended to.
    """

    language: str = "en"
    active_tab: FeatureKey = FeatureKey.TEXT_TO_PHOTO
    prompt: str = ""
    style: StyleKey = StyleKey.NONE
    aspect_ratio: str = DEFAULT_ASPECT_RATIO
    input_image1: ImageInput | None = None
    input_image2: ImageInput | None = None
    output_image: str | None = None
    is_loading: bool = False
    error: str | None = None
    notice: str | None = None
    library: Library = ()
    is_library_open: bool = False
    is_listening: bool = False
    dictation_prefix: str = ""


# ---------------------------------------------------------------------------
# Rules shared with the HTTP layer.
# ---------------------------------------------------------------------------


def generate_blocker(
    feature: FeatureKey, prompt: str, has_image1: bool, has_image2: bool
) -> str | None:
    """Return why generation cannot start, or None if it can."""
    if not prompt:
        return "A prompt is required"
    if feature is FeatureKey.TEXT_TO_PHOTO:
        return None
    if feature is FeatureKey.IMAGE_FUSION:
        return None if has_image1 and has_image2 else "Image fusion requires two images"
    if requires_image(feature) and not has_image1:
        return "An input image is required"
    return None


def reuse_target(active_tab: FeatureKey, has_image1: bool) -> tuple[int, FeatureKey]:
    """Decide which slot and tab a saved image goes to when reused.

    On the fusion tab with the first slot filled the image goes into slot 2.
    Otherwise it goes into slot 1, and every tab except fusion switches to
    image-to-photo.
    """
    if active_tab is FeatureKey.IMAGE_FUSION:
        return (2 if has_image1 else 1), FeatureKey.IMAGE_FUSION
    return 1, FeatureKey.IMAGE_TO_PHOTO


def download_filename(now_ms: int | None = None) -> str:
    """Return the file name offered when downloading a generated image."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"ai-photo-studio-{now_ms}.png"


# ---------------------------------------------------------------------------
# Queries.
# ---------------------------------------------------------------------------


def is_generate_disabled(state: AppState) -> bool:
    """Generation is blocked while loading or until the active tab has its inputs."""
    if state.is_loading:
        return True
    blocker = generate_blocker(
        state.active_tab,
        state.prompt,
        state.input_image1 is not None,
        state.input_image2 is not None,
    )
    return blocker is not None


def can_save_output(state: AppState) -> bool:
    """Saving needs an output and a prompt, and the output must not be saved yet."""
    if not state.output_image or not state.prompt:
        return False
    return not is_saved(state.library, state.output_image)


# ---------------------------------------------------------------------------
# Form transitions.
# ---------------------------------------------------------------------------


def set_language(state: AppState, language: str) -> AppState:
    return replace(state, language=language)


def select_tab(state: AppState, tab: FeatureKey) -> AppState:
    """Switch tabs and clear the prompt, inputs, output and error."""
    return replace(
        state,
        active_tab=tab,
        prompt="",
        input_image1=None,
        input_image2=None,
        output_image=None,
        error=None,
    )


def set_prompt(state: AppState, prompt: str) -> AppState:
    return replace(state, prompt=prompt)


def select_style(state: AppState, style: StyleKey) -> AppState:
    return replace(state, style=style)


def select_aspect_ratio(state: AppState, aspect_ratio: str) -> AppState:
    return replace(state, aspect_ratio=aspect_ratio)


def set_input_image(state: AppState, slot: int, image: ImageInput) -> AppState:
    """Fill an input slot; a newer upload replaces whatever was there."""
    if slot == 1:
        return replace(state, input_image1=image, error=None)
    if slot == 2:
        return replace(state, input_image2=image, error=None)
    raise ValueError(f"Image slot must be 1 or 2, got {slot}")


def upload_failed(state: AppState) -> AppState:
    return replace(state, error=ui_text(state.language)["errorTitle"])


# ---------------------------------------------------------------------------
# Generation transitions.
# ---------------------------------------------------------------------------


def start_generation(state: AppState) -> AppState:
    return replace(state, is_loading=True, output_image=None, error=None)


def generation_succeeded(state: AppState, data_url: str) -> AppState:
    return replace(state, is_loading=False, output_image=data_url)


def generation_failed(state: AppState) -> AppState:
    return replace(state, is_loading=False, error=ui_text(state.language)["errorMessage"])


# ---------------------------------------------------------------------------
# Library transitions.
# ---------------------------------------------------------------------------


def open_library(state: AppState) -> AppState:
    return replace(state, is_library_open=True)


def close_library(state: AppState) -> AppState:
    return replace(state, is_library_open=False)


def library_loaded(state: AppState, library: Library) -> AppState:
    return replace(state, library=library)


def library_changed(state: AppState, library: Library) -> AppState:
    return replace(state, library=library, notice=None)


def persistence_failed(state: AppState, library: Library) -> AppState:
    """Keep the in-memory library but tell the user it was not stored."""
    return replace(state, library=library, notice=ui_text(state.language)["storageError"])


def import_finished(state: AppState, library: Library, added: int) -> AppState:
    text = ui_text(state.language)
    notice = f"{text['importSuccess']} ({added})" if added > 0 else text["noNewImages"]
    return replace(state, library=library, notice=notice)


def import_failed(state: AppState) -> AppState:
    return replace(state, notice=ui_text(state.language)["importError"])


def use_saved_image(state: AppState, image: SavedImage) -> AppState:
    """Load a saved image into an input slot and close the library."""
    reused = select_for_reuse(image)
    slot, tab = reuse_target(state.active_tab, state.input_image1 is not None)
    if slot == 2:
        state = replace(state, input_image2=reused)
    else:
        state = replace(state, input_image1=reused, active_tab=tab)
    return replace(state, is_library_open=False)


# ---------------------------------------------------------------------------
# Dictation transitions.
# ---------------------------------------------------------------------------


def start_dictation(state: AppState) -> AppState:
    """Begin dictation; transcripts are appended after the current prompt."""
    prefix = f"{state.prompt} " if state.prompt else ""
    return replace(state, is_listening=True, dictation_prefix=prefix, prompt=prefix)


def dictation_transcript(state: AppState, transcript: str) -> AppState:
    """Apply the full transcript of the running dictation session."""
    if not state.is_listening:
        return state
    return replace(state, prompt=state.dictation_prefix + transcript)


def stop_dictation(state: AppState) -> AppState:
    return replace(state, is_listening=False)


def dictation_failed(state: AppState, reason: str) -> AppState:
    """Stop dictation; a denied microphone is reported to the user."""
    notice = ui_text(state.language)["microphoneDenied"] if reason == "not-allowed" else None
    return replace(state, is_listening=False, notice=notice or state.notice)
