import json
import re
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from skillsync.services.profile import parse_tech_stack


class SkillLevel(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class GrowthPotential(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class Theme(str, Enum):
    light = "light"
    dark = "dark"
    system = "system"


def wire_key(name: str) -> str:
    """snake_case attribute name to its camelCase wire key; wire keys pass through."""
    return re.sub(r"_([a-z0-9])", lambda match: match.group(1).upper(), name)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def _as_text(value: Any) -> Any:
    # Clients send GPA and year as numbers as often as strings.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class Education(CamelModel):
    school: str = ""
    degree: str = ""
    year: str = ""
    gpa: Optional[str] = None

    @field_validator("school", "degree", "year", "gpa", mode="before")
    @classmethod
    def numbers_as_text(cls, value: Any) -> Any:
        return _as_text(value)


class Skill(CamelModel):
    name: str
    level: SkillLevel = SkillLevel.beginner

    @field_validator("level", mode="before")
    @classmethod
    def unknown_level_is_beginner(cls, value: Any) -> Any:
        if isinstance(value, SkillLevel):
            return value
        if isinstance(value, str) and value.strip().lower() in SkillLevel.__members__:
            return value.strip().lower()
        return SkillLevel.beginner


class Experience(CamelModel):
    title: str = ""
    description: str = ""
    duration: str = ""
    tech_stack: List[str] = Field(default_factory=list)

    @field_validator("title", "description", "duration", mode="before")
    @classmethod
    def numbers_as_text(cls, value: Any) -> Any:
        return _as_text(value)

    @field_validator("tech_stack", mode="before")
    @classmethod
    def normalize_tech_stack(cls, value: Any) -> list[str]:
        return parse_tech_stack(value)


class AssessmentScores(CamelModel):
    technical: float = 0.0
    creative: float = 0.0
    analytical: float = 0.0
    leadership: float = 0.0
    communication: float = 0.0


class AssessmentResult(CamelModel):
    user_id: str
    scores: AssessmentScores
    dominant_type: str
    completed_at: str


class Profile(CamelModel):
    user_id: str
    bio: str = ""
    education: List[Education] = Field(default_factory=list)
    skills: List[Skill] = Field(default_factory=list)
    experience: List[Experience] = Field(default_factory=list)
    assessment_scores: Optional[AssessmentScores] = None
    dominant_type: Optional[str] = None
    assessment_completed_at: Optional[str] = None
    completion_percentage: int = 0
    db_id: Optional[str] = Field(default=None, alias="$dbId")


class Course(CamelModel):
    id: str
    title: str
    platform: str = ""
    instructor: Optional[str] = None
    duration: Optional[str] = None
    difficulty: SkillLevel = SkillLevel.beginner
    price: float = 0.0
    rating: float = 0.0
    url: str = ""
    category: str = ""
    bookmarked: bool = True
    completed: bool = False
    db_id: Optional[str] = Field(default=None, alias="$dbId")
    created_at: Optional[str] = Field(default=None, alias="$createdAt")


class CatalogPathway(CamelModel):
    id: str
    name: str
    category: str = ""
    level: SkillLevel = SkillLevel.beginner
    estimated_time: str = ""
    description: str = ""


class RoadmapStep(CamelModel):
    stage: str
    duration: str
    skills: List[str] = Field(default_factory=list)
    milestones: List[str] = Field(default_factory=list)
    description: str = ""


class RoadmapResource(CamelModel):
    type: str
    title: str
    url: Optional[str] = None
    description: str = ""


class Roadmap(CamelModel):
    pathway_title: str = Field(alias="pathway_title")
    description: str = ""
    steps: List[RoadmapStep] = Field(default_factory=list)
    resources: List[RoadmapResource] = Field(default_factory=list)
    estimated_duration: str = ""


def _decode_json_items(value: Any) -> Any:
    # Older rows hold each step or resource as its own JSON string.
    if not isinstance(value, list):
        return value
    return [json.loads(item) if isinstance(item, str) else item for item in value]


class PathwayMembership(CamelModel):
    pathway_id: str
    name: str
    category: str = ""
    level: SkillLevel = SkillLevel.beginner
    completed: bool = False
    completed_at: Optional[str] = None
    estimated_time: str = ""
    description: str = ""
    steps: List[RoadmapStep] = Field(default_factory=list)
    resources: List[RoadmapResource] = Field(default_factory=list)
    is_custom: bool = False
    db_id: Optional[str] = Field(default=None, alias="$dbId")


class Career(CamelModel):
    id: str
    title: str
    description: str = ""
    required_skills: List[str] = Field(default_factory=list)
    salary_range: str = ""
    growth_potential: GrowthPotential = GrowthPotential.medium
    match_percentage: Optional[int] = None


class QuizQuestion(CamelModel):
    id: str
    question: str
    options: List[str]
    category: str


# Remote rows. Unknown keys are rejected so drifted documents never reach the stores.


class RemoteRow(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    id: str = Field(alias="$id")
    created_at: Optional[str] = Field(default=None, alias="$createdAt")
    updated_at: Optional[str] = Field(default=None, alias="$updatedAt")
    user_id: str


class ProfileRow(RemoteRow):
    bio: str = ""
    education: List[Education] = Field(default_factory=list)
    skills: List[Skill] = Field(default_factory=list)
    experience: List[Experience] = Field(default_factory=list)
    assessment_scores: Optional[AssessmentScores] = None
    dominant_type: Optional[str] = None
    assessment_completed_at: Optional[str] = None
    completion_percentage: int = 0


class CourseRow(RemoteRow):
    course_id: str
    title: str
    platform: str = ""
    instructor: Optional[str] = None
    duration: Optional[str] = None
    difficulty: SkillLevel = SkillLevel.beginner
    price: float = 0.0
    rating: float = 0.0
    url: str = ""
    category: str = ""
    bookmarked: bool = True
    completed: bool = False


class PathwayRow(RemoteRow):
    pathway_id: str
    name: str
    category: str = ""
    level: SkillLevel = SkillLevel.beginner
    completed: bool = False
    completed_at: Optional[str] = None
    estimated_time: str = ""
    description: str = ""
    steps_data: List[RoadmapStep] = Field(default_factory=list)
    resources_data: List[RoadmapResource] = Field(default_factory=list)
    is_custom: bool = False

    @field_validator("steps_data", "resources_data", mode="before")
    @classmethod
    def decode_json_items(cls, value: Any) -> Any:
        return _decode_json_items(value)


# HTTP payloads


class CareerRecommendation(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    title: str
    reasoning: str
    summary: str


class RowCreateIn(BaseModel):
    userId: str
    data: dict[str, Any] = Field(default_factory=dict)


class RowUpdateIn(BaseModel):
    fields: dict[str, Any]


class RowsOut(BaseModel):
    rows: List[dict[str, Any]]
    total: int
