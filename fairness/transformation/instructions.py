"""Instructions sent to the transformation capability for each pipeline stage."""

from pathlib import Path

from fairness.transformation.models import TransformationInstruction
from fairness.transformation.prompt_loader import load_prompt_template

ANONYMIZATION = "anonymization"
SENTIMENT_NORMALIZATION = "sentiment_normalization"


def anonymization_instruction(prompt_path: Path | None = None) -> TransformationInstruction:
    """Strip names, gendered pronouns and demographic identifiers."""
    return TransformationInstruction(
        name=ANONYMIZATION,
        system_prompt=load_prompt_template("anonymization_system").strip(),
        prompt_template=load_prompt_template("anonymization_prompt", prompt_path),
        temperature=0.1,
        max_tokens=500,
    )


def sentiment_instruction(prompt_path: Path | None = None) -> TransformationInstruction:
    """Flatten emotional language into a constructive, objective register."""
    return TransformationInstruction(
        name=SENTIMENT_NORMALIZATION,
        system_prompt=load_prompt_template("sentiment_system").strip(),
        prompt_template=load_prompt_template("sentiment_prompt", prompt_path),
        temperature=0.2,
        max_tokens=400,
    )
