from __future__ import annotations

from typing import Dict, List

# Breeds in the order of the model's class scores (alphabetical, as trained).
DOG_BREEDS: List[str] = [
    "Beagle",
    "Chihuahua",
    "Doberman",
    "French_bulldog",
    "German_shepherd",
    "Golden_retriever",
    "Labrador_retriever",
    "Maltese_dog",
    "Pomeranian",
    "Pug",
    "Rottweiler",
    "Samoyed",
    "Shih-Tzu",
    "Siberian_husky",
    "Standard_poodle",
]


def load_class_names(metadata_path: str) -> List[str]:
    """
    Load ordered class names from a lightweight `metadata.yaml` next to the model:

        names:
          0: Beagle
          1: Chihuahua
          ...

    Ids must run 0..N-1 without gaps. This function intentionally avoids adding
    a PyYAML dependency.
    """

    names: Dict[int, str] = {}
    in_names = False

    with open(metadata_path, "r", encoding="utf-8") as f:
        for raw in f:
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            if line == "names:":
                in_names = True
                continue
            if not in_names:
                continue

            # Parse "id: label"
            if ":" not in line:
                continue
            left, right = line.split(":", 1)
            left = left.strip()
            right = right.strip().strip("'").strip('"')
            if not left.isdigit():
                continue
            names[int(left)] = right

    if sorted(names) != list(range(len(names))):
        raise ValueError(f"Class ids in {metadata_path} must run 0..{len(names) - 1} without gaps")
    return [names[i] for i in range(len(names))]
