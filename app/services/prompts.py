"""Instruction prompts sent to the vision-generation model."""
from typing import Optional


def build_translate_prompt(to_lang: str, from_lang: Optional[str] = None) -> str:
    source = from_lang or "the original language (detect it from the image)"
    return f"""You are a professional menu translation assistant.

Task: translate the text in this menu photo from {source} into {to_lang}.

Rules:
1. Find every dish name, description, section heading and note on the menu.
2. Translate each of them into natural, accurate {to_lang}.
3. Render the translation directly onto the original image, replacing or covering the original text in place.
4. Keep the original layout, relative font sizes and overall visual style.
5. Keep prices and numbers exactly as they are; translate words only.

Generate a new image containing the translated menu."""


def build_recognize_prompt(to_lang: str) -> str:
    return f"""You are a food recognition assistant.

## Task
Identify every food item in this image and label it in {to_lang}.

## Labeling style
- Place a small rounded label near the top-right corner of each food item
- Use a different background color per item (red, blue, green, orange, purple, ...) with white text
- Each food item gets exactly ONE label with its name in {to_lang}
- Labels must be readable, must not overlap each other and must not be oversized

## Rules
- Label food only: fruit, vegetables, dishes, ingredients, snacks, drinks
- Do not label plates, utensils, tables or other non-food objects
- If the same kind of food appears several times, label it once

## Output
- Generate the labeled image.
- Also return ONLY a JSON array of the food names in {to_lang}, with no markdown and no extra text."""
