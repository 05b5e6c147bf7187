"""Career facts, career search and alternative-career suggestions.

Public API:
    - CareerDirectory: fact lookup and tag search
    - AltCareerAdvisor: mismatches -> alternative careers
"""

from reality_coach.careers.advisor import AltCareerAdvisor
from reality_coach.careers.directory import CareerDirectory, CareerDirectoryError
from reality_coach.careers.models import AltCareer, Career, CareerFact

__all__ = [
    "AltCareerAdvisor",
    "CareerDirectory",
    "CareerDirectoryError",
    "AltCareer",
    "Career",
    "CareerFact",
]
