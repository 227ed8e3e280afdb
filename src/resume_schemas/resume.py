from typing import List, Dict, Any, Optional

import yaml
from pydantic import BaseModel, Field


class PersonalInfo(BaseModel):
    first_name: Optional[str] = ""
    last_name: Optional[str] = ""
    email: Optional[str] = ""
    phone: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    photo_url: Optional[str] = None


class Experience(BaseModel):
    id: Optional[str] = None
    company: Optional[str] = ""
    position: Optional[str] = ""
    location: Optional[str] = None
    start_date: Optional[str] = ""
    end_date: Optional[str] = None
    is_current: bool = False
    description: Optional[str] = ""
    achievements: Optional[List[str]] = None


class Education(BaseModel):
    id: Optional[str] = None
    institution: Optional[str] = ""
    degree: Optional[str] = ""
    field: Optional[str] = ""
    location: Optional[str] = None
    start_date: Optional[str] = ""
    end_date: Optional[str] = None
    is_current: bool = False
    gpa: Optional[str] = None
    honors: Optional[List[str]] = None


class Skill(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = ""
    category: Optional[str] = ""
    level: Optional[str] = None


class Language(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = ""
    proficiency: Optional[str] = None


class Certification(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = ""
    issuer: Optional[str] = ""
    date: Optional[str] = ""
    credential_id: Optional[str] = None
    credential_url: Optional[str] = None


class Project(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = ""
    description: Optional[str] = ""
    url: Optional[str] = None
    github_url: Optional[str] = None
    technologies: List[str] = Field(default_factory=list)
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class Publication(BaseModel):
    id: Optional[str] = None
    title: Optional[str] = ""
    authors: List[str] = Field(default_factory=list)
    venue: Optional[str] = ""
    year: Optional[int] = None
    doi: Optional[str] = None
    url: Optional[str] = None


class CustomSection(BaseModel):
    id: Optional[str] = None
    title: Optional[str] = ""
    content: Optional[str] = ""
    order: int = 0


class ResumeContent(BaseModel):
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    summary: Optional[str] = None
    experience: List[Experience] = Field(default_factory=list)
    education: List[Education] = Field(default_factory=list)
    # Skills are kept loose: stored snapshots may hold records in older shapes.
    skills: List[Any] = Field(default_factory=list)
    languages: Optional[List[Language]] = None
    certifications: Optional[List[Certification]] = None
    projects: Optional[List[Project]] = None
    publications: Optional[List[Publication]] = None
    custom_sections: Optional[List[CustomSection]] = None

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ResumeContent":
        try:
            data = yaml.safe_load(yaml_str) or {}
        except yaml.YAMLError as e:
            raise ValueError("Error parsing YAML file.") from e
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()
