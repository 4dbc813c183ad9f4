"""Threshold classification and narrative signals for a scored assessment."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

from ..schemas import PERSONAL_CATEGORY, Question

ClassificationType = Literal["qualified", "ramp-ready"]
RecommendedStatus = Literal["pending", "reviewed", "accepted", "rejected"]

WORK_STATUS_OPTIONS: tuple[str, ...] = (
    "Aktif olarak çalışmıyorum",
    "Part-time çalışıyorum",
    "Full-time çalışıyorum",
    "Freelancer olarak çalışıyorum",
    "Öğrenciyim",
)
EXPERIENCE_OPTIONS: tuple[str, ...] = (
    "0-1 yıl (Yeni başlayan)",
    "1-3 yıl (Junior)",
    "3-5 yıl (Mid-level)",
    "5-8 yıl (Senior)",
    "8+ yıl (Expert)",
)


@dataclass(frozen=True)
class ClassificationConfig:
    """Personal-info question ids and the phrases that bucket their answers."""

    experience_question_id: str = "personal-experience-years"
    location_question_id: str = "personal-location-konya"
    work_status_question_id: str = "personal-work-status"
    home_location: str = "Konya"
    experienced_markers: tuple[str, ...] = ("5-8", "8+", "5+")
    entry_markers: tuple[str, ...] = ("0-1", "Yeni", "new")
    home_location_markers: tuple[str, ...] = ("Evet, Konya", "Yes, Konya")
    relocation_markers: tuple[str, ...] = ("gelebilirim", "relocate")
    full_availability_markers: tuple[str, ...] = (
        "Aktif olarak çalışmıyorum",
        "Öğrenciyim",
        "not currently working",
        "student",
    )
    partial_availability_markers: tuple[str, ...] = ("Part-time", "Freelancer")

    def __post_init__(self) -> None:
        for name in (
            "experienced_markers",
            "entry_markers",
            "home_location_markers",
            "relocation_markers",
            "full_availability_markers",
            "partial_availability_markers",
        ):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))


@dataclass(frozen=True, slots=True)
class Classification:
    """Qualification decision with its narrative explanation."""

    threshold_met: bool
    classification: ClassificationType
    recommended_status: RecommendedStatus
    evaluation_notes: str
    strength_areas: list[str] = field(default_factory=list)
    development_areas: list[str] = field(default_factory=list)
    signals: dict[str, str | None] = field(default_factory=dict)


class ClassificationEngine:
    """Two-level classification against a case threshold."""

    def __init__(self, *, config: ClassificationConfig | None = None) -> None:
        self._config = config or ClassificationConfig()

    def classify(
        self,
        normalized_score: float,
        threshold: float,
        personal_info: Mapping[str, Any] | None = None,
    ) -> Classification:
        strengths: list[str] = []
        development: list[str] = []
        threshold_met = normalized_score >= threshold

        if threshold_met:
            classification: ClassificationType = "qualified"
            status: RecommendedStatus = "accepted"
            notes = (
                f"Scored {_fmt(normalized_score)}/100 and met the case threshold of "
                f"{_fmt(threshold)}; classified as qualified."
            )
            strengths.extend(["Met the case threshold", "Technical proficiency"])
        else:
            classification = "ramp-ready"
            status = "pending"
            notes = (
                f"Scored {_fmt(normalized_score)}/100 against a case threshold of "
                f"{_fmt(threshold)}; routed to the onboarding ramp and re-evaluated after training."
            )
            strengths.append("Training potential")
            development.append("Reach the case threshold")

        info = personal_info or {}
        signals = {
            "experience": self._experience_bucket(info),
            "location": self._location_bucket(info),
            "availability": self._availability_bucket(info),
        }

        if signals["experience"] == "experienced":
            strengths.append("Industry experience")
        elif signals["experience"] == "entry":
            if threshold_met:
                strengths.append("Fast learning potential")
            else:
                development.append("Gain hands-on experience")

        if signals["location"] == "home":
            strengths.append(f"Based in {self._config.home_location}")
        elif signals["location"] == "relocatable":
            strengths.append("Location flexibility")
        elif signals["location"] == "constrained":
            development.append("Location constraint")

        if signals["availability"] == "full":
            strengths.append("Full-time availability")
        elif signals["availability"] == "partial":
            development.append("Time constraints")

        return Classification(
            threshold_met=threshold_met,
            classification=classification,
            recommended_status=status,
            evaluation_notes=notes,
            strength_areas=strengths,
            development_areas=development,
            signals=signals,
        )

    def personal_questions(self) -> list[Question]:
        """Unscored profile questions that feed the supplementary signals."""
        config = self._config
        records: list[dict[str, Any]] = [
            {"id": "personal-name", "type": "text", "question": "Tam Adınız"},
            {"id": "personal-email", "type": "email", "question": "E-posta Adresiniz"},
            {"id": "personal-phone", "type": "phone", "question": "Telefon Numaranız"},
            {
                "id": config.location_question_id,
                "type": "radio",
                "question": f"{config.home_location}'da mısınız?",
                "options": [
                    f"Evet, {config.home_location}'dayım",
                    f"Hayır, başka şehirdeyim ama {config.home_location}'ya gelebilirim",
                    "Hayır, remote çalışmayı tercih ederim",
                ],
            },
            {
                "id": config.work_status_question_id,
                "type": "radio",
                "question": "Çalışma Durumunuz",
                "options": list(WORK_STATUS_OPTIONS),
            },
            {
                "id": config.experience_question_id,
                "type": "radio",
                "question": "Kaç yıllık deneyiminiz var?",
                "options": list(EXPERIENCE_OPTIONS),
            },
        ]
        return [
            Question.model_validate({**record, "category": PERSONAL_CATEGORY}) for record in records
        ]

    def _experience_bucket(self, info: Mapping[str, Any]) -> str | None:
        answer = _text(info.get(self._config.experience_question_id))
        if not answer:
            return None
        if _contains_any(answer, self._config.experienced_markers):
            return "experienced"
        if _contains_any(answer, self._config.entry_markers):
            return "entry"
        return "intermediate"

    def _location_bucket(self, info: Mapping[str, Any]) -> str | None:
        answer = _text(info.get(self._config.location_question_id))
        if not answer:
            return None
        if _contains_any(answer, self._config.home_location_markers):
            return "home"
        if _contains_any(answer, self._config.relocation_markers):
            return "relocatable"
        return "constrained"

    def _availability_bucket(self, info: Mapping[str, Any]) -> str | None:
        answer = _text(info.get(self._config.work_status_question_id))
        if not answer:
            return None
        if _contains_any(answer, self._config.full_availability_markers):
            return "full"
        if _contains_any(answer, self._config.partial_availability_markers):
            return "partial"
        return "limited"


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _contains_any(text: str, markers: tuple[str, ...]) -> bool:
    lowered = text.casefold()
    return any(marker.casefold() in lowered for marker in markers)


def _fmt(value: float) -> str:
    return f"{value:g}"


__all__ = [
    "Classification",
    "ClassificationConfig",
    "ClassificationEngine",
    "ClassificationType",
    "EXPERIENCE_OPTIONS",
    "RecommendedStatus",
    "WORK_STATUS_OPTIONS",
]
