"""
Static information about the rice leaf diseases the remote model can report.

The labels emitted by the model are free text, so the lookup normalizes them
before matching against the table.
"""

from typing import Dict, List, Literal, Tuple

from pydantic import BaseModel


class DiseaseInfo(BaseModel):
    name: str
    description: str
    treatment: str
    severity: Literal["low", "medium", "high"]


DISEASE_DATABASE: Dict[str, DiseaseInfo] = {
    "Bacterial Leaf Blight": DiseaseInfo(
        name="Bacterial Leaf Blight",
        description="A serious bacterial disease that causes wilting of seedlings and yellowing and drying of leaves.",
        treatment="Use resistant varieties, practice field sanitation, and apply copper-based bactericides.",
        severity="high",
    ),
    "Brown Spot": DiseaseInfo(
        name="Brown Spot",
        description="Fungal disease causing brown lesions with gray centers on leaves, reducing photosynthesis.",
        treatment="Apply fungicides, ensure proper nutrition, and practice crop rotation.",
        severity="medium",
    ),
    "Healthy Rice Leaf": DiseaseInfo(
        name="Healthy Rice Leaf",
        description="No disease detected. The rice plant appears to be in good health.",
        treatment="Continue regular maintenance and monitoring.",
        severity="low",
    ),
    "Leaf Blast": DiseaseInfo(
        name="Leaf Blast",
        description="Fungal disease causing diamond-shaped lesions on leaves that can lead to complete drying.",
        treatment="Use resistant varieties, apply fungicides, and maintain proper water management.",
        severity="high",
    ),
    "Leaf Scald": DiseaseInfo(
        name="Leaf Scald",
        description="Fungal disease with characteristic scald-like lesions on leaf tips that progress down the leaf blade.",
        treatment="Plant resistant varieties, apply fungicides, and practice good field drainage.",
        severity="medium",
    ),
    "Narrow Brown Leaf Spot": DiseaseInfo(
        name="Narrow Brown Leaf Spot",
        description="Fungal disease characterized by narrow, brown lesions parallel to leaf veins.",
        treatment="Use fungicides, practice crop rotation, and maintain balanced fertilization.",
        severity="medium",
    ),
    "Rice Hispa": DiseaseInfo(
        name="Rice Hispa",
        description="Insect pest that causes whitish streaks on leaves as larvae mine inside leaf tissue.",
        treatment="Apply appropriate insecticides, remove weeds around rice fields, and avoid over-fertilization with nitrogen.",
        severity="medium",
    ),
    "Sheath Blight": DiseaseInfo(
        name="Sheath Blight",
        description="Fungal disease that initially affects the leaf sheaths near the water line, forming oval lesions that expand upward.",
        treatment="Use resistant varieties, avoid excessive nitrogen, and apply fungicides during early infection stages.",
        severity="high",
    ),
    "Healthy": DiseaseInfo(
        name="Healthy",
        description="No disease detected. The rice plant appears to be in good health.",
        treatment="Continue regular maintenance and monitoring.",
        severity="low",
    ),
}

# Checked in order; "narrow brown" must come before "brown spot".
KEYWORD_RULES: List[Tuple[str, str]] = [
    ("leaf scald", "Leaf Scald"),
    ("narrow brown", "Narrow Brown Leaf Spot"),
    ("rice hispa", "Rice Hispa"),
    ("sheath blight", "Sheath Blight"),
    ("brown spot", "Brown Spot"),
    ("leaf blast", "Leaf Blast"),
    ("bacterial", "Bacterial Leaf Blight"),
]


def lookup_disease_info(label: str) -> DiseaseInfo:
    """
    Maps a predicted label to its entry in the disease table.

    Exact (case-insensitive) names win, then keyword rules. Labels that match
    nothing get a generic entry named after the label itself.

    :param label: The label returned by the model.
    :type label: str
    :return: The matching disease information.
    :rtype: DiseaseInfo
    """
    clean = (label or "").strip()
    lowered = clean.lower()

    for key, info in DISEASE_DATABASE.items():
        if key.lower() == lowered:
            return info

    for keyword, key in KEYWORD_RULES:
        if keyword in lowered:
            return DISEASE_DATABASE[key]

    return DiseaseInfo(
        name=clean,
        description="Information about this disease is not available in our database.",
        treatment="Consult with an agricultural expert for proper treatment options.",
        severity="medium",
    )


def format_confidence(score: float) -> str:
    """Renders a [0, 1] score as a percentage with one decimal, e.g. ``92.0%``."""
    return f"{score * 100:.1f}%"
