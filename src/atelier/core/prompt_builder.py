"""Prompt assembly for every Atelier workflow.

Prompts are plain strings built by concatenation. The instruction texts
below are opaque to the rest of the system: nothing parses them, and the
only logic here is which fragments are included and in what order.

Primary Edit Structure
----------------------
::

    [Background instruction]          (only if a style is set and the
                                       background is empty)

    [Detail prompt]. [Process]. [Process]. [Style]. [Custom text]

Fragments are joined with ``". "`` and empty fragments are skipped.

Aspect Ratio Appendix
---------------------
Workflows that accept a target aspect ratio append
:func:`aspect_ratio_appendix`, which is empty for ``"original"``.

Usage
-----
::

    prompt = build_primary_prompt(
        ["Restore this image to high quality."],
        style_prompt="Recreate the entire scene as a classical oil painting.",
        custom_text="make the sky purple",
        background_empty=True,
    )
"""

from __future__ import annotations

from .payloads import ORIGINAL_ASPECT_RATIO

# ---------------------------------------------------------------------------
# Fixed instructions.
# ---------------------------------------------------------------------------

BACKGROUND_CREATION_INSTRUCTION = (
    "[SPECIAL INSTRUCTION] The original image has a transparent or solid-color background. "
    "You MUST create a new, complete, and natural-looking background that is contextually "
    "appropriate for the chosen style and subject. The final image must be a fully realized scene."
)

BACKGROUND_GENERATION_STEP = (
    "4.  **BACKGROUND GENERATION (MANDATORY)**: The BASE image has no background. You MUST "
    "create a new, photorealistic, and contextually appropriate background that seamlessly "
    "integrates with the synthesized subject. The final image must be a complete scene."
)

BACKGROUND_INTEGRATION_STEP = (
    "4.  **BACKGROUND INTEGRATION**: The BASE image has an existing background. You must "
    "seamlessly blend the synthesized subject with the existing background, ensuring consistent "
    "lighting, shadows, and perspective."
)

REMOVE_BACKGROUND_PROMPT = (
    "Your task is to create a high-quality alpha mask. The main subject of the image must be "
    "white, and the background must be black. Use shades of gray on the edges of the subject for "
    "smooth, anti-aliased blending, especially for details like hair. The output must be only the "
    "black and white mask itself."
)

INPAINT_PROMPT = (
    "You are an expert image inpainting model. You will receive two images followed by this text "
    "prompt. 1. The first image is the original image. 2. The second image is a mask. The white "
    "area in this mask indicates the region that needs to be removed and realistically filled. "
    "Your task is to remove the content within the white masked area from the first image and "
    "intelligently fill it in so it blends seamlessly with the surrounding pixels. Output only the "
    "final, single, inpainted image."
)

ID_PHOTO_PROMPT = """[TASK] Convert the provided photograph into a professional, Korean-style ID photo.

[STRICT INSTRUCTIONS]
1.  **Identity Preservation (Top Priority)**: The facial features MUST be identical to the original.
2.  **Mandatory Wardrobe Change**: The subject's clothing MUST be changed to a formal business suit.
3.  **Background**: The background MUST be a solid, pure white color (#FFFFFF).
4.  **Pose & Gaze**: The subject MUST face directly forward, looking at the camera.
5.  **Lighting**: Apply soft, even studio lighting typical of professional portraiture, such as butterfly lighting, to create a flattering look.
6.  **Framing (CRITICAL)**: The final output image MUST be generated with a perfect 3:4 aspect ratio. The composition must be a standard upper-body ID photo shot. DO NOT leave extra space; the subject must fill the 3:4 frame correctly."""

FLOORPLAN_PROMPT = """[MISSION] Convert the provided 2D floor plan into a photorealistic 3D model.

[ABSOLUTE CAMERA RULE] You must replicate the following camera perspective precisely:
Imagine you are looking at a dollhouse from an upper corner.

[DETAILED VIEW SPECIFICATIONS]
1.  **Perspective**: A 3D isometric view. DO NOT create a flat top-down image.
2.  **Camera Angle**: A high-angle (bird's-eye view) tilted at approximately 45 degrees.
3.  **Composition**: Use a 'cutaway' style where the front and side walls are removed so the entire interior layout (rooms, furniture, pathways) is clearly visible. The camera should be positioned outside one of the corners.
4.  **Style**: The final image must be a high-quality, photorealistic 3D render.
5.  **Details**: Populate the space with modern furniture, realistic textures (wood floors, tiles), and natural lighting with soft shadows.
6.  **Background**: The area outside the rendered model should be a clean, solid white background."""

LIFE_ALBUM_PROMPT = """[TOP PRIORITY MISSION]
Your absolute top priority is to create a life album of **that exact person** in the provided original image. Preserving facial likeness outweighs every other artistic requirement. Every generated face must be clearly recognisable as the person in the original photo at a different age. Failing to keep the face consistent means the whole generation has failed.

[OUTPUT DETAILS]
- **Overall format**: A scrapbook-style collage with a {aspect_ratio} aspect ratio.
- **Photos to include**:
  1. **Now ({age})**: The person from the original photo kept exactly as they are, with only the background replaced by a completely new, beautiful landscape.
  2. **Other points in life**: The same person as an infant, a child, a high-school student, a university student, and in their 30s, 50s and 70s.
- **Most important rule (mandatory)**:
  - **Absolute facial consistency**: Facial features (eyes, nose, mouth, face shape) in every age must be unmistakably the same as the original person. They must never look like someone else.
- **Style guide**:
  - **Layout**: Arrange the photos irregularly yet aesthetically.
  - **Photo frames**: Give each photo a distinct frame, such as polaroid or vintage frames.
  - **No labels**: Do not add any text or labels indicating age or time."""

COMIC_STYLES = ("noir", "webtoon", "american")
COMIC_LANGUAGES = ("ko", "en")

_COMIC_NO_TEXT = "The panel must NOT contain any text, speech bubbles, or captions."

_COMIC_LANGUAGE_INSTRUCTIONS = {
    "ko": "The following text is in Korean and must be rendered exactly as written.",
    "en": "The following text is in English and must be rendered exactly as written.",
}

LIFE_ALBUM_ASPECT_RATIOS = ("1:1", "16:9", "9:16")

STORY_IMAGE_COUNT = 8

RECIPE_COMMAND_PREFIX = "[SYSTEM COMMAND:"


# ---------------------------------------------------------------------------
# Edit and synthesis prompts.
# ---------------------------------------------------------------------------


def aspect_ratio_appendix(ratio: str) -> str:
    """Return the scene-expansion command for *ratio*, or ``""`` for ``"original"``."""
    if ratio == ORIGINAL_ASPECT_RATIO:
        return ""
    return f"""
[ABSOLUTE COMMAND: ASPECT RATIO & SCENE EXPANSION]
- Target Aspect Ratio: {ratio}
- Your primary task is to generate the final image directly in this target aspect ratio.
- You are strictly forbidden from cropping the original image's main subject.
- To achieve the new aspect ratio, you MUST creatively expand the scene (outpainting). If the target is wider, you must invent and seamlessly paint new details to the left and right. If it's taller, invent and paint new details above and below.
- The final image must contain the ENTIRE original scene, plus the new, expanded areas. Any cropping of the original content is a complete failure of this task."""


def build_primary_prompt(
    process_prompts: list[str],
    style_prompt: str | None = None,
    custom_text: str = "",
    *,
    detail_prompt: str | None = None,
    background_empty: bool = False,
) -> str:
    """Compile the primary edit prompt.

    Args:
        process_prompts: Instructions of the selected processes, excluding
            the upscale process.
        style_prompt: Instruction of the selected style, if any.
        custom_text: Free text, already translated to English.
        detail_prompt: Detail-enhancement instruction placed first when the
            upscale process is selected.
        background_empty: Whether the source image has no meaningful
            background. Only matters when a style is selected.

    Returns:
        The compiled prompt.
    """
    fragments = [detail_prompt, *process_prompts, style_prompt, custom_text]
    prompt = ". ".join(f for f in fragments if f)

    if background_empty and style_prompt:
        prompt = f"{BACKGROUND_CREATION_INSTRUCTION}\n\n{prompt}"
    return prompt


def build_synthesis_prompt(instruction: str, background_empty: bool, aspect_ratio: str) -> str:
    """Compile the multi-image synthesis prompt around the translated *instruction*."""
    background_step = BACKGROUND_GENERATION_STEP if background_empty else BACKGROUND_INTEGRATION_STEP
    prompt = f"""[CORE MISSION: High-Fidelity Character Synthesis]

[ABSOLUTE RULE #1: FACIAL IDENTITY LOCK]
Your most critical, non-negotiable mission is to perfectly preserve the facial identity of the person in the BASE image. The final output's face MUST be a 1:1 match to the BASE image's face. Do NOT alter facial structure, features, or unique characteristics. This rule overrides all other artistic instructions. Any change to the face is a complete failure.

[TASK INSTRUCTIONS]
1.  **ANALYZE INPUTS**: You have a BASE image (the primary subject) and one or more SOURCE images (containing elements to add).
2.  **EXECUTE USER GOAL**: The user's instruction is: "{instruction}".
3.  **SYNTHESIZE**: Create a SINGLE new image by applying the user's goal to the BASE image.
{background_step}
5.  **OUTPUT**: Your response MUST be ONLY the single, final, synthesized image. Do not return multiple images or text."""
    return prompt + aspect_ratio_appendix(aspect_ratio)


# ---------------------------------------------------------------------------
# Quick action prompts.
# ---------------------------------------------------------------------------


def build_floorplan_prompt(aspect_ratio: str) -> str:
    return FLOORPLAN_PROMPT + aspect_ratio_appendix(aspect_ratio)


def build_comic_prompt(style: str, text: str, language: str, aspect_ratio: str) -> str:
    """Compile a single comic panel prompt.

    Args:
        style: One of ``noir``, ``webtoon`` or ``american``
        text: Caption text to render verbatim, or ``""`` for a silent panel
        language: ``ko`` or ``en``; describes the caption's language
        aspect_ratio: Target aspect ratio or ``"original"``

    Raises:
        ValueError: If style or language is unknown
    """
    if style not in COMIC_STYLES:
        raise ValueError(f"Unknown comic style '{style}'")
    if language not in COMIC_LANGUAGES:
        raise ValueError(f"Unknown comic language '{language}'")

    language_instruction = _COMIC_LANGUAGE_INSTRUCTIONS[language]

    if style == "noir":
        caption = (
            f'A caption box at the top of the panel must contain the following text: "{text}". '
            f"{language_instruction}"
            if text
            else _COMIC_NO_TEXT
        )
        prompt = (
            "A single comic book panel in a gritty, noir art style, using high-contrast black and "
            "white ink. The scene should be a dramatic re-imagining of the provided image's subject "
            f"and pose. {caption} The lighting must be harsh and dramatic, with deep shadows, to "
            "create a moody and somber atmosphere."
        )
    elif style == "webtoon":
        caption = (
            "A speech bubble or caption, styled appropriately for a webtoon, must contain the "
            f'following text: "{text}". {language_instruction}'
            if text
            else _COMIC_NO_TEXT
        )
        prompt = (
            "A single panel in a clean, modern Korean webtoon style. The art should feature crisp "
            "digital line art, vibrant cell shading, and expressive characters based on the provided "
            f"image. {caption} The overall mood should be bright and engaging."
        )
    else:
        caption = (
            "A caption box with a yellow background, typical of the era, must contain the following "
            f'text: "{text}". {language_instruction}'
            if text
            else _COMIC_NO_TEXT
        )
        prompt = (
            "A single panel in the style of a classic American superhero comic book from the 1980s. "
            "The art must have bold inks and use Ben-Day dot patterns for color. The composition must "
            f"be dynamic and action-oriented, based on the provided image. {caption}"
        )

    return prompt + aspect_ratio_appendix(aspect_ratio)


def build_life_album_prompt(age: str, aspect_ratio: str) -> str:
    return LIFE_ALBUM_PROMPT.format(age=f"age {age}", aspect_ratio=aspect_ratio)


# ---------------------------------------------------------------------------
# Text-to-content prompts.
# ---------------------------------------------------------------------------


def build_story_prompt(idea: str) -> str:
    return f"""[SYSTEM COMMAND: VISUAL STORY GENERATION]
- **Task**: Create a sequence of exactly {STORY_IMAGE_COUNT} images that tell a complete, silent story based on the user's idea.
- **Absolute Rule**: The images MUST NOT contain any text, words, captions, or speech bubbles. The storytelling must be purely visual.
- **Output Format**: Your entire response MUST consist of only the {STORY_IMAGE_COUNT} generated image parts.
[USER'S STORY IDEA]
"{idea}\""""


def build_recipe_prompt(dish: str, language: str = "Korean") -> str:
    """Compile the interleaved text/image recipe command for *dish*."""
    return f"""{RECIPE_COMMAND_PREFIX} ILLUSTRATED RECIPE GENERATION - STRICT ENFORCEMENT]

[ABSOLUTE, NON-NEGOTIABLE CORE MISSION]
Your task is to generate a **complete, unabridged, step-by-step recipe** for the user's requested dish, from the very first ingredient preparation to the final plated dish.

[UNBREAKABLE RULES]
1.  **LANGUAGE**: All text, including step instructions, titles, and any descriptions, MUST be in **{language.upper()}**. No exceptions.
2.  **FORMAT**: The recipe MUST be a strict sequence of TEXT-IMAGE PAIRS. For EVERY single text instruction, you MUST IMMEDIATELY follow it with a corresponding generated image that visually represents that exact step.
3.  **COMPLETENESS**: The recipe MUST be **fully comprehensive**. It must guide the user from the very first step (preparing the ingredients) to the final, finished dish, ready to be served. It must not be a summary or a partial recipe.
4.  **IMAGE CONTENT (CRITICAL)**: The generated images MUST be **purely visual**. They MUST NOT contain any text, letters, numbers, step indicators, watermarks, or any other overlays.

[FAILURE CONDITION]
A response is considered a COMPLETE FAILURE if:
-   A text step is provided WITHOUT an image immediately following it.
-   The recipe is incomplete or just a summary.
-   The total number of text parts does not EXACTLY match the total number of image parts.
-   Any of the generated images contain text.

[OUTPUT STRUCTURE - YOU MUST FOLLOW THIS]
1.  **Part 1 (Text):** "Step 1: [description]"
2.  **Part 2 (Image):** [A purely visual, text-free generated image for Step 1]
3.  **Part 3 (Text):** "Step 2: [description]"
4.  **Part 4 (Image):** [A purely visual, text-free generated image for Step 2]
...and so on until the dish is complete.

[USER'S REQUESTED DISH]
"{dish}"

Now, begin generating the complete recipe, strictly adhering to the TEXT-IMAGE PAIR format."""


def is_recipe_command(prompt: str) -> bool:
    """Whether *prompt* is already a full recipe command rather than a dish name."""
    return prompt.startswith(RECIPE_COMMAND_PREFIX)


# ---------------------------------------------------------------------------
# Translation and suggestion prompts.
# ---------------------------------------------------------------------------


def build_translation_prompt(text: str, source_language: str = "Korean") -> str:
    return (
        f"Translate the following {source_language} text to English. Respond with only the "
        "translated text, without any introductory phrases or explanations:\n\n"
        f'"{text}"'
    )


def build_composition_suggestion_prompt(
    background_empty: bool, aspect_ratio: str, language: str = "Korean"
) -> str:
    """Ask for one sentence describing how to combine the base and source images."""
    status = "NO_BACKGROUND" if background_empty else "HAS_BACKGROUND"

    if aspect_ratio != ORIGINAL_ASPECT_RATIO:
        ratio_step = (
            "3.  **Generate Part C (Aspect Ratio) - MANDATORY**: You MUST complete the sentence with "
            f"a phrase that commands the AI to expand the scene to a **{aspect_ratio}** ratio "
            "without cropping."
        )
        final_check = "-   Does your sentence have Part A, B, and C?"
    else:
        ratio_step = ""
        final_check = "-   Does your sentence have both an action part and a background part?"

    return f"""
[YOUR MISSION]
Your mission is to generate ONE creative {language} sentence suggesting how to combine the provided images.

[BACKGROUND CONTEXT]
-   **Background Status**: {status}
-   This status is CRITICAL. Your entire response depends on it.

[STEP-BY-STEP INSTRUCTIONS]
1.  **Generate Part A (The Action)**: First, describe the core action of combining the images.
2.  **Generate Part B (The Background) - MANDATORY**: Second, you MUST complete the sentence by describing the background, strictly following the rule for the given 'Background Status'.
{ratio_step}

[RULES FOR PART B]
-   **If Status is 'NO_BACKGROUND'**: You MUST invent a new, interesting background that fits the action in Part A.
-   **If Status is 'HAS_BACKGROUND'**: You MUST suggest TRANSFORMING the existing background to create a cohesive new scene. Do NOT just say "blend it". Be creative.

[FINAL CHECK]
{final_check}
-   Did you follow the correct rule for the given Background Status?
-   Is the output ONLY the single {language} sentence?

Now, generate the sentence."""


def build_primary_suggestion_prompt(
    process_labels: list[str],
    style_label: str | None,
    custom_text: str,
    background_empty: bool,
    aspect_ratio: str = ORIGINAL_ASPECT_RATIO,
    language: str = "Korean",
) -> str:
    """Ask the text model to rewrite the user's selections as one rich edit prompt."""
    background_status = (
        "The original image has a transparent or meaningless solid-color background."
        if background_empty
        else "The original image has a meaningful background."
    )
    style = f'"{style_label}"' if style_label else "None"
    processes = ", ".join(f'"{p}"' for p in process_labels) if process_labels else "None"

    rules = [
        "**THE CONVERSION COMMAND**: Your generated prompt MUST start with a clear, natural-sounding "
        "conversion command such as \"Convert the original image into [Elaborated Style]...\". "
        "Elaborate the raw style name into a descriptive one. If no style is selected, this rule "
        "does not apply.",
        "**MATERIAL DESCRIPTION**: Describe the materials and textures that the selected style is "
        "made of (plastic and paint for figures, felt for wool dolls, glass and lead lines for "
        "stained glass, and so on).",
        "**BACKGROUND**: Follow the Background Status. If the background is empty you MUST create a "
        "natural background that suits the style. Otherwise transform the existing background to "
        "match the style.",
    ]
    if aspect_ratio != ORIGINAL_ASPECT_RATIO:
        rules.append(
            f"**ASPECT RATIO RECOMPOSITION**: Command the AI to reach a **{aspect_ratio}** aspect "
            "ratio by creatively expanding the scene (outpainting), describing what to add, and "
            "explicitly forbid cropping the original subject."
        )
    rules.extend(
        [
            "**CORE MISSION**: Eliminate any hint that the original image was a photo. Describe the "
            "scene as if painting it from scratch in the target style.",
            f"**LANGUAGE**: The final output prompt MUST be in **{language.upper()}**.",
            "**OUTPUT FORMAT**: Return ONLY the generated prompt text, with no explanations, "
            "prefixes, or markdown.",
        ]
    )
    numbered = "\n".join(f"{i}.  {rule}" for i, rule in enumerate(rules, start=1))

    return f"""[SYSTEM ROLE]
You are a world-class visual concept artist and prompt engineer. Analyze the user's original image and their selections, then write a new, masterful prompt that reimagines the image in the chosen style while preserving its core concept.

[CONTEXT]
- **Background Status**: {background_status}

[USER SELECTIONS]
1.  **Style**: {style}
2.  **Processes**: [{processes}]
3.  **Additional Request**: "{custom_text or 'None'}"

[PROMPT GENERATION RULES]
{numbered}

Now, based on the user's selections and the rules above, create the new prompt."""


def build_original_suggestion_prompt(idea: str, role: str, template: str, language: str = "Korean") -> str:
    """Ask for a detailed text-to-image prompt following a category *template*."""
    return f"""[MISSION]
{role}

[TEMPLATE]
{template}

[USER IDEA]
"{idea}"

[OUTPUT FORMAT]
- **Language**: MUST be in {language.upper()}.
- **Style**: Use vivid, specific descriptions to paint a visually rich scene.
- **Response Format**: Do NOT include any extra explanations. The response must be only the generated prompt sentence, ready for the user to copy and use."""


def build_story_suggestion_prompt(language: str = "Korean") -> str:
    return f"""[YOUR MISSION]
Analyze the provided image and generate a creative and concise story idea in {language.upper()} that could be told in {STORY_IMAGE_COUNT} silent images. The story should have a clear beginning, middle, and a compelling end.

[OUTPUT FORMAT]
- **Language**: MUST be in {language.upper()}.
- **Response Format**: Do NOT include any extra explanations. The response must be ONLY the generated story idea sentence."""


def build_dish_suggestion_prompt(language: str = "Korean") -> str:
    return f"""[YOUR MISSION]
Analyze the provided image of a food dish. Identify the name of the dish as specifically as possible.

[OUTPUT FORMAT]
- **Language**: MUST be in {language.upper()}.
- **Response Format**: Do NOT include any extra explanations (like "The dish in the image is..."). The response must be ONLY the name of the dish."""
