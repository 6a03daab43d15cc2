"""System instructions and greetings for each assistant feature."""
from __future__ import annotations

from dataclasses import asdict

from assistant.models import FEATURES, FeatureOptions, UserConfig
from prompts import render_prompt

FEATURE_TITLES = {
    "planner": "Generador de Planificaciones",
    "exam_generator": "Generador de Exámenes",
    "exam_corrector": "Corrector de Exámenes",
    "speech_generator": "Generador de Discursos",
}

INITIAL_MESSAGES = {
    "planner": "Listo para planificar. Describe el tema, las actividades, y cualquier otro detalle para tu planificación de clase.",
    "exam_generator": "Listo para crear el examen. Detalla cualquier otra indicación o formato específico que necesites.",
    "exam_corrector": "Listo para corregir. Por favor, sube el examen del alumno (PDF o JPG) y proporciona cualquier contexto adicional o las respuestas correctas en el chat si es necesario.",
    "speech_generator": "Listo para redactar el discurso. ¿Cuáles son los puntos clave o el mensaje que te gustaría transmitir?",
}

# Shown in place of blank free-text fields
_UNSPECIFIED = {
    "objectives": "no especificados",
    "materials": "no especificados",
    "topics": "no especificados",
    "correction_criteria": "no especificados",
    "grading_system": "no especificado",
    "grading_scale": "no especificado",
}

# Numeric fields fall back to their usual value when left blank
_NUMERIC_FALLBACKS = {
    "duration": "40",
    "estimated_time": "60",
    "num_questions": "10",
    "speech_duration": "5",
}


def build_system_instruction(
        feature: str,
        user: UserConfig,
        options: FeatureOptions | None = None,
) -> str:
    """Builds the system instruction for one assistant feature.

    :param feature: One of planner, exam_generator, exam_corrector, speech_generator.
    :param user: The teacher's profile.
    :param options: Feature form values; defaults are used when omitted.
    :return: The profile preamble followed by the feature-specific paragraph.
    """
    if feature not in FEATURES:
        raise ValueError(f"Unknown feature: {feature!r}. Expected one of {', '.join(FEATURES)}")

    values = asdict(options or FeatureOptions())
    for key, placeholder in _UNSPECIFIED.items():
        values[key] = values[key].strip() or placeholder
    for key, fallback in _NUMERIC_FALLBACKS.items():
        values[key] = values[key].strip() or fallback

    base = render_prompt(
        "base_instruction",
        level=user.level.value,
        name=user.name,
        subject=user.subject,
        grade=user.grade,
    )
    return f"{base} {render_prompt(feature, **values)}"
