"""
Pydantic models for the matrix JSON produced by the external generator.

The generator emits camelCase keys; both camelCase and snake_case are
accepted. Unknown keys are ignored so newer generator versions keep loading.
"""
from typing import Any, Dict, List, Optional, Union
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')


# ============================================================================
# CANDIDATE MATRIX
# ============================================================================

class CandidateSkill(_Payload):
    name: str
    level: Optional[str] = None
    years: Optional[float] = Field(default=None, validation_alias=AliasChoices('years', 'yearsOfExperience'))


class LocationSignals(_Payload):
    country: Optional[str] = Field(default=None, validation_alias=AliasChoices('country', 'currentCountry'))
    city: Optional[str] = Field(default=None, validation_alias=AliasChoices('city', 'currentCity'))
    preferred_countries: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices('preferred_countries', 'preferredCountries')
    )
    preferred_cities: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices('preferred_cities', 'preferredCities')
    )
    preferred_locations: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices('preferred_locations', 'preferredLocations')
    )
    remote_affinity: Optional[Union[bool, str]] = Field(
        default=None, validation_alias=AliasChoices('remote_affinity', 'remoteAffinity', 'remote')
    )
    willing_to_relocate: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices('willing_to_relocate', 'willingToRelocate')
    )


class EvidenceSnippet(_Payload):
    text: str
    category: Optional[str] = None
    source: Optional[str] = None
    id: Optional[str] = None


class CandidateMatrixPayload(_Payload):
    """Validated candidate matrix, ready to be stored as a CandidateMatrix row."""
    skills: List[Union[CandidateSkill, str]] = Field(default_factory=list)
    roles: List[Any] = Field(default_factory=list)
    total_years_experience: int = Field(
        default=0, ge=0, validation_alias=AliasChoices('total_years_experience', 'totalYearsExperience')
    )
    domains: List[str] = Field(default_factory=list)
    education: List[Any] = Field(default_factory=list)
    languages: List[Any] = Field(default_factory=list)
    location_signals: LocationSignals = Field(
        default_factory=LocationSignals, validation_alias=AliasChoices('location_signals', 'locationSignals')
    )
    confidence: Optional[float] = None
    evidence: List[EvidenceSnippet] = Field(default_factory=list)
    model_version: Optional[str] = Field(default=None, validation_alias=AliasChoices('model_version', 'modelVersion'))

    @field_validator('total_years_experience', mode='before')
    @classmethod
    def _round_years(cls, value: Any) -> Any:
        if isinstance(value, float):
            return max(0, int(round(value)))
        return value if value is not None else 0

    @field_validator('confidence')
    @classmethod
    def _clamp_confidence(cls, value: Optional[float]) -> Optional[float]:
        if value is None:
            return None
        return max(0.0, min(100.0, value))

    def skills_json(self) -> List[Dict[str, Any]]:
        return [
            {'name': skill} if isinstance(skill, str) else skill.model_dump(exclude_none=True)
            for skill in self.skills
        ]


# ============================================================================
# JOB MATRIX
# ============================================================================

class JobSkill(_Payload):
    skill: str = Field(validation_alias=AliasChoices('skill', 'name'))
    weight: Optional[float] = Field(default=None, ge=0)


class JobLocation(_Payload):
    country: Optional[str] = None
    city: Optional[str] = None
    location_type: Optional[str] = Field(
        default=None, validation_alias=AliasChoices('location_type', 'locationType', 'type')
    )

    @field_validator('location_type')
    @classmethod
    def _check_type(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip().lower()
        if value not in ('onsite', 'hybrid', 'remote'):
            raise ValueError(f"location_type must be onsite, hybrid or remote, got '{value}'")
        return value


class JobMatrixPayload(_Payload):
    """Validated job matrix, ready to replace the job's JobMatrix row."""
    required_skills: List[Union[JobSkill, str]] = Field(
        default_factory=list, validation_alias=AliasChoices('required_skills', 'requiredSkills')
    )
    preferred_skills: List[Union[JobSkill, str]] = Field(
        default_factory=list, validation_alias=AliasChoices('preferred_skills', 'preferredSkills')
    )
    experience_weight: int = Field(default=0, ge=0, validation_alias=AliasChoices('experience_weight', 'experienceWeight'))
    location_weight: int = Field(default=0, ge=0, validation_alias=AliasChoices('location_weight', 'locationWeight'))
    domain_weight: int = Field(default=0, ge=0, validation_alias=AliasChoices('domain_weight', 'domainWeight'))
    min_years_experience: Optional[int] = Field(
        default=None, ge=0, validation_alias=AliasChoices('min_years_experience', 'minYearsExperience')
    )
    domains: List[str] = Field(default_factory=list)
    location: JobLocation = Field(default_factory=JobLocation)
    model_version: Optional[str] = Field(default=None, validation_alias=AliasChoices('model_version', 'modelVersion'))

    @staticmethod
    def _skills_json(skills: List[Union[JobSkill, str]]) -> List[Dict[str, Any]]:
        return [
            {'skill': skill} if isinstance(skill, str) else skill.model_dump(exclude_none=True)
            for skill in skills
        ]

    def required_skills_json(self) -> List[Dict[str, Any]]:
        return self._skills_json(self.required_skills)

    def preferred_skills_json(self) -> List[Dict[str, Any]]:
        return self._skills_json(self.preferred_skills)
