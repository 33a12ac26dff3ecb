"""Prompt Composer - builds blend-mode instructions for Gemini image editing."""

from dataclasses import dataclass

from ..models.request import BlendMode, GenerationRequest


ORDINALS = ["first", "second", "third", "fourth", "fifth"]

PRIMARY = "primary"
SECONDARY = "secondary"


@dataclass(frozen=True)
class ModeDirective:
    """Roles and directive lines for one blend mode.

    ``master`` supplies background and pose, ``garment_source`` the clothing,
    ``identity_source`` the face; each is PRIMARY or SECONDARY. Lines use
    ``{master}``, ``{garment}`` and ``{identity}`` placeholders that resolve,
    through those roles, to positional labels such as "first supplied image".
    """
    master: str
    garment_source: str
    identity_source: str
    lines: tuple[str, ...]

    def role_images(self) -> dict[str, str]:
        """Placeholder name -> PRIMARY/SECONDARY."""
        return {
            "master": self.master,
            "garment": self.garment_source,
            "identity": self.identity_source,
        }


MODE_DIRECTIVES: dict[BlendMode, ModeDirective] = {
    BlendMode.PRESERVE_SUBJECT_BACKGROUND: ModeDirective(
        master=PRIMARY,
        garment_source=SECONDARY,
        identity_source=PRIMARY,
        lines=(
            "GOAL: Dress the person in the {identity} with the outfit from the {garment}.",
            "PRIMARY SOURCE (person and background): the {master} is the template for body, face, pose and background.",
            "SECONDARY SOURCE (garment): the {garment} is the clothing to use.",
            "TASK: Replace the existing clothing in the {master} with the clothing from the {garment}.",
            "CONSTRAINT: The background must be pixel-identical to the {master}. Keep 100% of the person's identity.",
        ),
    ),
    BlendMode.STUDIO_BACKGROUND: ModeDirective(
        master=PRIMARY,
        garment_source=SECONDARY,
        identity_source=PRIMARY,
        lines=(
            "GOAL: Professional studio fashion photography.",
            "SOURCE 1: Use the person's face and build from the {identity}.",
            "SOURCE 2: Use the clothing from the {garment}.",
            "ENVIRONMENT: The background is discarded and replaced with a neutral studio setting: clean, minimalist, high-end, soft lighting.",
        ),
    ),
    BlendMode.PRESERVE_SCENE_IDENTITY_SWAP: ModeDirective(
        master=SECONDARY,
        garment_source=SECONDARY,
        identity_source=PRIMARY,
        lines=(
            "GOAL: Face swap onto the model in a specific scene.",
            "SOURCE 1 (person): Use 100% of the facial features, skin tone and identity from the {identity}.",
            "SOURCE 2 (scene): the {master} is the MASTER for background, clothing and environment.",
            "TASK: Take the person's head from the {identity} and place it onto the body in the {master}.",
            "CONSTRAINT: The identity/face is transplanted onto the {master}'s scene while its background and garment remain untouched.",
        ),
    ),
}
def image_label(position: int) -> str:
    """Positional label for the image at 0-based ``position``."""
    return f"{ORDINALS[position]} supplied image"


class PromptComposer:
    """Deterministic instruction text for try-on and background edits.

    Images are named by the order they are sent: primary, secondary,
    detail, accessory. Absent images are skipped, so later ones move up.
    """

    def compose(
        self,
        mode: BlendMode,
        has_secondary: bool = True,
        has_detail: bool = False,
        has_accessory: bool = False,
        note: str = "",
        aspect_ratio: str | None = None,
    ) -> str:
        """Build the instruction text for a blend mode.

        Args:
            mode: Blend mode deciding master/secondary roles
            has_secondary: Whether a garment/scene image follows the primary image
            has_detail: Whether a garment close-up is supplied
            has_accessory: Whether an accessory image is supplied
            note: Free-text user directive, appended verbatim when non-empty
            aspect_ratio: Target aspect ratio, stated as a guideline

        Returns:
            Instruction text, identical for identical inputs
        """
        directive = MODE_DIRECTIVES[mode]

        position = 0
        labels = {PRIMARY: image_label(position)}
        if has_secondary:
            position += 1
            labels[SECONDARY] = image_label(position)

        # Roles played by an absent image drop the lines that name them
        roles = directive.role_images()
        role_labels = {role: labels[image] for role, image in roles.items() if image in labels}
        missing = [role for role in roles if role not in role_labels]

        lines = []
        for line in directive.lines:
            if any("{" + role + "}" in line for role in missing):
                continue
            lines.append(line.format(**role_labels))

        if has_detail:
            position += 1
            lines.append(
                f"DETAIL: the {image_label(position)} is a close-up of the garment; "
                "match its fabric, pattern and finish exactly."
            )
        if has_accessory:
            position += 1
            lines.append(
                f"ACCESSORY: add the accessory from the {image_label(position)} to the person naturally."
            )

        guidelines = [
            "Result must be highly photorealistic.",
            "Seamless blending of skin tones.",
            "Realistic fabric rendering.",
        ]
        if aspect_ratio:
            guidelines.append(f"Aspect ratio: {aspect_ratio}.")
        if note and note.strip():
            guidelines.append(f"Additional modification: {note}")

        sections = [
            "You are a professional digital fashion editor.",
            "\n".join(f"- {line}" for line in lines),
            "GUIDELINES:\n" + "\n".join(f"{i}. {g}" for i, g in enumerate(guidelines, start=1)),
            "OUTPUT: Provide only the final edited image.",
        ]
        return "\n\n".join(sections)

    def compose_for(self, request: GenerationRequest) -> str:
        """Instruction text for a try-on request."""
        return self.compose(
            mode=request.mode,
            has_secondary=request.secondary_image is not None,
            has_detail=request.detail_image is not None,
            has_accessory=request.accessory_image is not None,
            note=request.note,
            aspect_ratio=request.aspect_ratio.value,
        )

    def compose_background(
        self,
        background_prompt: str,
        has_detail: bool = False,
        has_custom_background: bool = False,
    ) -> str:
        """Instruction text for replacing the background of an edited image."""
        position = 0
        lines = [f"Keep the subject in the {image_label(position)} identical."]

        if has_detail:
            position += 1
            lines.append(f"The {image_label(position)} is a close-up of the outfit; keep it accurate.")

        if has_custom_background:
            position += 1
            lines.append(f"Replace the background with the environment from the {image_label(position)}.")
        else:
            lines.append(f"Replace the background with: {background_prompt}.")

        return " ".join(lines)
