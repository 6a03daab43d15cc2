"""
Data models for the teaching assistant.

This module contains the teacher profile and the per-feature form options
used to build system instructions for the chat session.
"""
from __future__ import annotations

import json
import logging
import typing as t
from dataclasses import asdict, dataclass, field
from enum import Enum

from agenda.config import USER_CONFIG_KEY
from agenda.storage import KeyValueStorage

logger = logging.getLogger(__name__)

FeatureType = t.Literal["planner", "exam_generator", "exam_corrector", "speech_generator"]
FEATURES: tuple[str, ...] = t.get_args(FeatureType)


class EducationalLevel(Enum):
    """Educational levels of the Argentine school system."""
    INICIAL = "Nivel Inicial"
    PRIMARIO = "Nivel Primario"
    SECUNDARIO = "Nivel Secundario"
    TERCIARIO = "Nivel Terciario"
    UNIVERSITARIO = "Nivel Universitario"


GRADES_BY_LEVEL: dict[EducationalLevel, list[str]] = {
    EducationalLevel.INICIAL: ["Sala de 3 años", "Sala de 4 años", "Sala de 5 años"],
    EducationalLevel.PRIMARIO: [
        "Primer Grado", "Segundo Grado", "Tercer Grado",
        "Cuarto Grado", "Quinto Grado", "Sexto Grado",
    ],
    EducationalLevel.SECUNDARIO: [
        "Primer Año", "Segundo Año", "Tercer Año",
        "Cuarto Año", "Quinto Año", "Sexto Año",
    ],
    EducationalLevel.TERCIARIO: ["Primer Año", "Segundo Año", "Tercer Año"],
    EducationalLevel.UNIVERSITARIO: ["No aplica"],
}

SPEECH_EVENTS = [
    "Acto de Inicio de Ciclo Lectivo",
    "Día de la Bandera",
    "Día de la Independencia",
    "Paso a la Inmortalidad del Gral. San Martín",
    "Día del Maestro",
    "Día de la Diversidad Cultural",
    "Acto de Fin de Ciclo Lectivo",
]

SPEECH_AUDIENCES = ["Directivos", "Docentes", "Alumnos", "Padres", "Comunidad Educativa"]


@dataclass
class UserConfig:
    """The teacher's profile, set once after login."""
    name: str
    subject: str
    level: EducationalLevel
    grade: str

    def __post_init__(self) -> None:
        if not isinstance(self.level, EducationalLevel):
            self.level = EducationalLevel(self.level)
        if self.grade not in GRADES_BY_LEVEL[self.level]:
            raise ValueError(f"Grade {self.grade!r} does not belong to {self.level.value}")

    def to_dict(self) -> dict[str, str]:
        data = asdict(self)
        data["level"] = self.level.value
        return data


@dataclass
class FeatureOptions:
    """Form values for every feature; each feature reads only its own fields."""
    # planner
    plan_type: str = "Diaria"
    duration: str = "40"
    objectives: str = ""
    materials: str = ""
    # exam_generator
    exam_type: str = "Opción Múltiple"
    difficulty: str = "Medio"
    topics: str = ""
    estimated_time: str = "60"
    num_questions: str = "10"
    # exam_corrector
    correction_criteria: str = ""
    grading_system: str = "Numérico (1-10)"
    grading_scale: str = "10-9: Excelente, 8-7: Bueno, 6: Aprobado, 5-1: Desaprobado"
    # speech_generator
    event_type: str = field(default_factory=lambda: SPEECH_EVENTS[0])
    audience: str = field(default_factory=lambda: SPEECH_AUDIENCES[0])
    speech_duration: str = "5"
    speech_tone: str = "Formal"


def save_user_config(storage: KeyValueStorage, config: UserConfig) -> None:
    storage.set(USER_CONFIG_KEY, json.dumps(config.to_dict(), ensure_ascii=False))


def load_user_config(storage: KeyValueStorage) -> t.Optional[UserConfig]:
    """Loads the saved profile.

    A corrupt record is discarded and None is returned, as if none was saved.
    """
    raw = storage.get(USER_CONFIG_KEY)
    if raw is None:
        return None
    try:
        data = json.loads(raw)
        if data is None:
            return None
        return UserConfig(
            name=data["name"],
            subject=data["subject"],
            level=data["level"],
            grade=data["grade"],
        )
    except (ValueError, TypeError, KeyError, RecursionError) as e:
        logger.warning("Discarding corrupt user profile: %s", e)
        storage.set(USER_CONFIG_KEY, "null")
        return None
