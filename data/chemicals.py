"""
Chemical reference data.

Provides the bundled reference chemicals and a pluggable repository
interface so the in-memory table can be swapped for a file or database
without changing the prediction code.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional

from errors import InvalidInputError, NotFoundError


@dataclass(frozen=True)
class ChemicalProperties:
    """Reference properties of a released chemical.

    Args:
        id: Numeric identifier.
        name: Display name.
        volatility_level: 1-10, higher means more volatile. Drives the
            proxy emission rate.
        solubility_level: 1-10, higher means more soluble in water.
        hazard_type: Physical form category (gas, liquid, particulate, ...).
        description: Free-text hazard description.
    """

    id: int
    name: str
    volatility_level: int
    solubility_level: int
    hazard_type: str
    description: str = ""

    @classmethod
    def from_dict(cls, record: dict) -> "ChemicalProperties":
        return cls(
            id=int(record["id"]),
            name=record["name"],
            volatility_level=int(record["volatility_level"]),
            solubility_level=int(record["solubility_level"]),
            hazard_type=record["hazard_type"],
            description=record.get("description") or "",
        )

    def to_dict(self) -> dict:
        return asdict(self)


def get_chemicals() -> List[dict]:
    """Return the reference chemical table as a list of dicts."""
    return [
        {"id": 1, "name": "Ammonia Gas", "volatility_level": 8, "solubility_level": 9,
         "hazard_type": "gas",
         "description": "Colorless gas with pungent odor. Highly water soluble. "
                        "Irritant to eyes, skin, and respiratory system."},
        {"id": 2, "name": "Chlorine Gas", "volatility_level": 7, "solubility_level": 6,
         "hazard_type": "gas",
         "description": "Greenish-yellow gas with strong odor. Moderate water solubility. "
                        "Severe respiratory irritant."},
        {"id": 3, "name": "Crude Oil", "volatility_level": 3, "solubility_level": 1,
         "hazard_type": "liquid",
         "description": "Complex mixture of hydrocarbons. Low volatility and water "
                        "solubility. Forms slicks on water."},
        {"id": 4, "name": "Benzene", "volatility_level": 6, "solubility_level": 2,
         "hazard_type": "liquid",
         "description": "Colorless liquid with sweet odor. Moderate volatility, low "
                        "water solubility. Carcinogenic."},
        {"id": 5, "name": "Sulfur Dioxide", "volatility_level": 5, "solubility_level": 8,
         "hazard_type": "gas",
         "description": "Colorless gas with strong odor. Moderate volatility, high water "
                        "solubility. Respiratory irritant."},
        {"id": 6, "name": "Hydrogen Sulfide", "volatility_level": 8, "solubility_level": 7,
         "hazard_type": "gas",
         "description": "Colorless gas, smells like rotten eggs. Highly toxic, flammable. "
                        "Respiratory irritant."},
        {"id": 7, "name": "Carbon Monoxide", "volatility_level": 9, "solubility_level": 1,
         "hazard_type": "gas",
         "description": "Colorless, odorless, tasteless gas. Highly toxic, flammable. "
                        "Interferes with oxygen transport."},
        {"id": 8, "name": "Methane", "volatility_level": 10, "solubility_level": 1,
         "hazard_type": "gas",
         "description": "Colorless, odorless gas. Extremely flammable, primary component "
                        "of natural gas. Asphyxiant."},
        {"id": 9, "name": "Xylene", "volatility_level": 5, "solubility_level": 1,
         "hazard_type": "liquid",
         "description": "Colorless liquid, sweet odor. Moderate volatility, low "
                        "solubility. Irritant, affects central nervous system."},
        {"id": 10, "name": "Formaldehyde", "volatility_level": 7, "solubility_level": 10,
         "hazard_type": "gas",
         "description": "Colorless gas with pungent odor, often in solution (formalin). "
                        "High solubility. Respiratory irritant, carcinogen."},
        {"id": 11, "name": "Lead Dust", "volatility_level": 1, "solubility_level": 1,
         "hazard_type": "particulate",
         "description": "Heavy metal particulate. Non-volatile, low solubility. "
                        "Cumulative neurotoxin."},
        {"id": 12, "name": "Mercury Vapor", "volatility_level": 6, "solubility_level": 1,
         "hazard_type": "gas",
         "description": "Elemental mercury evaporates at room temp. Low solubility. "
                        "Highly toxic, especially via inhalation."},
        {"id": 13, "name": "Phenol", "volatility_level": 4, "solubility_level": 7,
         "hazard_type": "liquid/solid",
         "description": "Colorless crystalline solid or liquid, distinctive odor. "
                        "Moderate volatility, good solubility. Corrosive, toxic."},
    ]


class ChemicalRepository(ABC):
    """Abstract lookup of chemical properties by id."""

    @abstractmethod
    def get(self, chemical_id: int) -> ChemicalProperties:
        """Return the chemical with this id.

        Raises:
            NotFoundError: If no chemical has this id.
        """
        ...

    @abstractmethod
    def list_all(self) -> List[ChemicalProperties]:
        """Return every chemical, ordered by id."""
        ...


class InMemoryChemicalRepository(ChemicalRepository):
    """Repository over a list of record dicts (the bundled table by default)."""

    def __init__(self, records: Optional[List[dict]] = None):
        if records is None:
            records = get_chemicals()
        self._by_id: Dict[int, ChemicalProperties] = {}
        for record in records:
            chemical = ChemicalProperties.from_dict(record)
            self._by_id[chemical.id] = chemical

    def get(self, chemical_id: int) -> ChemicalProperties:
        try:
            return self._by_id[int(chemical_id)]
        except (KeyError, TypeError, ValueError):
            raise NotFoundError(f"Chemical with ID {chemical_id} not found") from None

    def list_all(self) -> List[ChemicalProperties]:
        return [self._by_id[k] for k in sorted(self._by_id)]


class FileChemicalRepository(InMemoryChemicalRepository):
    """Load chemical records from a JSON array on disk.

    Args:
        path: Path to a JSON file with an array of chemical dicts.

    Raises:
        InvalidInputError: If required keys are missing or data is invalid.
        FileNotFoundError: If the file does not exist.
    """

    _REQUIRED_KEYS = {"id", "name", "volatility_level", "solubility_level", "hazard_type"}

    def __init__(self, path: str):
        super().__init__(self._load_records(path))

    @classmethod
    def _load_records(cls, path: str) -> List[dict]:
        with open(path) as f:
            data = json.load(f)
        if not isinstance(data, list) or len(data) == 0:
            raise InvalidInputError(
                f"Chemicals file must contain a non-empty JSON array: {path}"
            )
        for i, record in enumerate(data):
            missing = cls._REQUIRED_KEYS - set(record.keys())
            if missing:
                raise InvalidInputError(
                    f"Chemical #{i} missing required keys {missing} in {path}"
                )
        return data
